"""
Module for managing project configuration.
"""

import json
import os
from pathlib import Path
from typing import Optional
from .constants import ON_ERROR_ABORT, ON_ERROR_POLICIES
from .exceptions import ConfigurationError

# --- Configuration ---
CONFIG_FILE = os.getenv("NOTION_CONFIG_FILE", "config.json")
OUTPUT_DIR = os.getenv("NOTION_OUTPUT_DIR", "output")
DEFAULT_DEPTH = os.getenv("NOTION_DEPTH", "2")
ON_ERROR = os.getenv("NOTION_ON_ERROR", ON_ERROR_ABORT)


def load_token(token: Optional[str] = None, config_file: Optional[str] = None) -> str:
    """
    Resolve the Notion integration token.

    Resolution order: explicit argument, NOTION_TOKEN environment variable,
    then the ``notion_token`` key of the JSON configuration file.

    Returns:
        str: the integration token

    Raises:
        ConfigurationError: If no token is available or the file is invalid
    """
    if token:
        return token

    notion_token = os.getenv("NOTION_TOKEN")
    if notion_token:
        return notion_token

    config_path = Path(config_file or CONFIG_FILE)
    if not config_path.exists():
        raise ConfigurationError(
            "No Notion token provided. Pass --token or set the NOTION_TOKEN "
            "environment variable. Create an integration at "
            "https://www.notion.so/my-integrations"
        )

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Error parsing JSON file: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Error loading configuration: {e}") from e

    notion_token = config.get("notion_token") if isinstance(config, dict) else None
    if not notion_token:
        raise ConfigurationError(
            f"Notion token not configured in '{config_path}'."
        )
    return notion_token


def parse_depth(value) -> int:
    """Parse a traversal depth, which must be a non-negative integer."""
    try:
        depth = int(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid depth: {value!r}") from e
    if depth < 0:
        raise ConfigurationError(f"Depth must be non-negative, got {depth}")
    return depth


def parse_on_error(value: str) -> str:
    """Validate the partial-failure policy name."""
    policy = (value or "").strip().lower()
    if policy not in ON_ERROR_POLICIES:
        raise ConfigurationError(
            f"Invalid error policy {value!r}; expected one of {', '.join(ON_ERROR_POLICIES)}"
        )
    return policy


def ensure_directories(output_dir: str) -> None:
    """Create the output directory if it doesn't exist."""
    try:
        Path(output_dir).mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ConfigurationError(f"Unable to create directories: {e}") from e
