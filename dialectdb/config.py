"""
Connection configuration management.

This module handles loading connection configurations from pyproject.toml
and environment variables with proper precedence and validation.
"""

import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from dialectdb.exceptions import ConfigurationError

if TYPE_CHECKING:
    from dialectdb.connection import Connection

DEFAULT_LOG_LIMIT = 1000


@dataclass
class ConnectionOptions:
    """Options of a single database connection.

    Either ``dsn`` is given directly, or ``type`` names a dialect and the DSN
    is generated from ``host``, ``port`` and ``dbname``.
    """

    dsn: str | None = None
    type: str | None = None
    host: str | None = None
    port: int | None = None
    dbname: str | None = None
    username: str | None = None
    password: str | None = None
    # Keyword arguments passed through to the driver library's connect()
    driver_options: dict[str, Any] = field(default_factory=dict)
    # Physical table name prefix
    prefix: str = ""
    charset: str = "utf8"
    # Overrides the driver's native dialect
    dialect: str | None = None
    # Diagnostic log entries kept, None keeps every entry
    log_limit: int | None = DEFAULT_LOG_LIMIT

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> "ConnectionOptions":
        """Create options from a configuration mapping.

        Raises:
            ConfigurationError: If an option has the wrong type or is unknown
        """
        known = set(cls.__dataclass_fields__)
        unknown = sorted(set(config) - known)
        if unknown:
            raise ConfigurationError(f"Unknown connection option(s): {', '.join(unknown)}")

        options = dict(config)

        port = options.get("port")
        if port is not None:
            try:
                options["port"] = int(port)
            except (TypeError, ValueError):
                raise ConfigurationError(f"Invalid port: {port!r}") from None

        if "log_limit" in options and options["log_limit"] is not None:
            try:
                options["log_limit"] = int(options["log_limit"])
            except (TypeError, ValueError):
                raise ConfigurationError(f"Invalid log_limit: {options['log_limit']!r}") from None
            if options["log_limit"] < 0:
                raise ConfigurationError("log_limit must not be negative")

        if not isinstance(options.get("driver_options", {}), dict):
            raise ConfigurationError("driver_options must be a table of driver arguments")

        return cls(**options)

    def resolve_dsn(self) -> str:
        """The DSN to open, generated from the structured options when not given."""
        if self.dsn:
            return self.dsn

        if not self.type:
            raise ConfigurationError("Either a DSN or a database type is required")

        from dialectdb.dialects.registry import get_dialect_class

        dialect_class = get_dialect_class(self.type)
        if dialect_class.dsn_scheme is None:
            raise ConfigurationError(f"The {dialect_class.name} dialect has no driver to connect with")
        return dialect_class.generate_connection_string(self)


class DatabaseConfigManager:
    """Manages connection configurations from multiple sources."""

    # Environment variables overriding the TOML configuration
    ENV_MAPPINGS = {
        "DIALECTDB_DSN": "dsn",
        "DIALECTDB_TYPE": "type",
        "DIALECTDB_HOST": "host",
        "DIALECTDB_PORT": "port",
        "DIALECTDB_DBNAME": "dbname",
        "DIALECTDB_USERNAME": "username",
        "DIALECTDB_PASSWORD": "password",
        "DIALECTDB_PREFIX": "prefix",
        "DIALECTDB_CHARSET": "charset",
        "DIALECTDB_DIALECT": "dialect",
        "DIALECTDB_LOG_LIMIT": "log_limit",
    }

    def __init__(self, project_root: str | None = None) -> None:
        self.project_root = Path(project_root) if project_root else Path.cwd()
        self.logger = logging.getLogger(self.__class__.__name__)

    def load_config(self, config_name: str = "default") -> ConnectionOptions:
        """
        Load connection configuration from pyproject.toml and environment variables.

        Args:
            config_name: Name of the configuration to load (default: "default")

        Returns:
            ConnectionOptions with merged configuration

        Raises:
            ConfigurationError: If configuration is invalid or missing
        """
        # Load from pyproject.toml
        toml_config = self._load_toml_config(config_name)

        # Load from environment variables
        env_config = self._load_env_config()

        # Merge configurations (env vars override toml)
        merged_config = self._merge_configs(toml_config, env_config)

        if not merged_config:
            raise ConfigurationError(f"No database configuration '{config_name}' found")

        return ConnectionOptions.from_dict(merged_config)

    def connect(self, config_name: str = "default") -> "Connection":
        """Open a connection with the named configuration."""
        from dialectdb.connection import Connection

        options = self.load_config(config_name)
        return Connection.open(options.resolve_dsn(), options)

    def _load_toml_config(self, config_name: str) -> dict[str, Any]:
        """Load configuration from pyproject.toml."""
        toml_file = self.project_root / "pyproject.toml"
        if not toml_file.exists():
            self.logger.debug("No pyproject.toml found")
            return {}

        try:
            with open(toml_file, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            self.logger.warning(f"Could not read pyproject.toml: {e}")
            return {}

        # Look for [tool.dialectdb.database] or [tool.dialectdb.databases.<name>]
        dialectdb_config = data.get("tool", {}).get("dialectdb", {})

        # Check for single database config in tool.dialectdb.database
        if "database" in dialectdb_config:
            return dict(dialectdb_config["database"])

        # Check for multiple database configs in tool.dialectdb.databases
        databases = dialectdb_config.get("databases", {})
        if isinstance(databases, dict) and config_name in databases:
            return dict(databases[config_name])

        self.logger.debug(f"No database configuration '{config_name}' found in pyproject.toml")
        return {}

    def _load_env_config(self) -> dict[str, Any]:
        """Load configuration from environment variables."""
        env_config = {}

        for env_var, config_key in self.ENV_MAPPINGS.items():
            value = os.getenv(env_var)
            if value is not None:
                env_config[config_key] = value

        return env_config

    def _merge_configs(self, toml_config: dict[str, Any], env_config: dict[str, Any]) -> dict[str, Any]:
        """Merge TOML and environment configurations."""
        merged = toml_config.copy()
        merged.update(env_config)
        return merged


def load_connection_options(
    config_name: str = "default", project_root: str | None = None
) -> ConnectionOptions:
    """
    Convenience function to load connection options.

    Args:
        config_name: Name of the configuration to load
        project_root: Project root directory (defaults to current directory)

    Returns:
        ConnectionOptions object
    """
    manager = DatabaseConfigManager(project_root)
    return manager.load_config(config_name)
