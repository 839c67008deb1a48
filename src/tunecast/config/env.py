"""Environment variable reader with dependency injection support.

EnvReader parses TUNECAST_* variables with type conversion. Tests inject a
plain mapping instead of touching os.environ.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

logger = logging.getLogger(__name__)

_TRUE_VALUES = frozenset({"true", "1", "yes", "on"})
_FALSE_VALUES = frozenset({"false", "0", "no", "off"})


class EnvReader:
    """Environment variable reader with type conversion.

    Unparseable values are logged and treated as unset, so a typo in the
    environment falls back to the file or default value.

    Example:
        reader = EnvReader(env={"TUNECAST_RETENTION_DAYS": "30"})
        reader.get_int("TUNECAST_RETENTION_DAYS")  # 30
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        """Initialize the environment reader.

        Args:
            env: Optional mapping to use instead of os.environ.
        """
        self._env: Mapping[str, str] = env if env is not None else os.environ

    def get_str(self, var: str, default: str | None = None) -> str | None:
        """Get a string, treating an empty value as unset."""
        value = self._env.get(var)
        if value is None or not value.strip():
            return default
        return value.strip()

    def get_int(self, var: str, default: int | None = None) -> int | None:
        """Get an integer.

        Args:
            var: Environment variable name.
            default: Default value if not set or invalid.

        Returns:
            Parsed integer, or default if not set or invalid.
        """
        value = self.get_str(var)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            logger.warning("Invalid integer value for %s: %s", var, value)
            return default

    def get_bool(self, var: str, default: bool | None = None) -> bool | None:
        """Get a boolean.

        Recognizes true/1/yes/on and false/0/no/off (case-insensitive).
        Anything else is logged and treated as unset.
        """
        value = self.get_str(var)
        if value is None:
            return default
        lowered = value.lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        logger.warning("Invalid boolean value for %s: %s", var, value)
        return default

    def get_path(self, var: str, default: Path | None = None) -> Path | None:
        """Get a path with tilde expansion. Existence is not checked."""
        value = self.get_str(var)
        if value is None:
            return default
        return Path(value).expanduser()
