"""
CLI utility functions.

Pure, stateless utility functions used across CLI commands.
"""

import json
import logging
from typing import Any, Literal

import yaml

OutputFormat = Literal["json", "yaml"]


def parse_params(params_string: str | None) -> dict[str, Any]:
    """
    Parse query parameters into a dictionary.

    Args:
        params_string: Parameters in JSON object format (None for empty)

    Returns:
        Dictionary of placeholder name -> value

    Raises:
        ValueError: If the string is not a valid JSON object
    """
    if not params_string:
        return {}

    try:
        params = json.loads(params_string)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid parameters format (must be valid JSON): {e}") from e

    if not isinstance(params, dict):
        raise ValueError("Parameters must be a JSON object")
    return params


def render(data: Any, format: OutputFormat = "json") -> str:
    """Serialize command output as JSON or YAML."""
    if format == "yaml":
        return yaml.safe_dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)
    return json.dumps(data, indent=2, default=str)


def setup_logging(verbose: bool = False) -> None:
    """
    Set up logging configuration.

    Args:
        verbose: If True, set logging level to DEBUG, otherwise WARNING
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s - %(name)s - %(message)s")
