"""TOML config file parsing."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from tunecast.exceptions import ConfigError

logger = logging.getLogger(__name__)


class TomlParseError(ConfigError):
    """Raised when a config file exists but cannot be parsed."""


def parse_toml(content: str) -> dict[str, Any]:
    """Parse TOML content.

    Raises:
        TomlParseError: If the content is not valid TOML.
    """
    try:
        return tomllib.loads(content)
    except tomllib.TOMLDecodeError as e:
        raise TomlParseError(str(e)) from e


def load_toml_file(path: Path, *, strict: bool = False) -> dict[str, Any]:
    """Load and parse a TOML file.

    Args:
        path: Path to the TOML file.
        strict: If True, raise TomlParseError on parse or read failures.
            If False (default), log a warning and return an empty dict.

    Returns:
        Parsed dictionary. Empty dict if the file doesn't exist.
    """
    if not path.exists():
        logger.debug("TOML file not found: %s", path)
        return {}

    try:
        config = parse_toml(path.read_text(encoding="utf-8"))
    except (TomlParseError, OSError) as e:
        if strict:
            if isinstance(e, TomlParseError):
                raise
            raise TomlParseError(f"Cannot read {path}: {e}") from e
        logger.warning("Failed to load TOML file %s: %s", path, e)
        return {}

    logger.debug("Loaded TOML config from %s", path)
    return config
