"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. CLI arguments (passed directly to get_config)
2. Environment variables (TUNECAST_*)
3. Config file (~/.tunecast/config.toml)
4. Default values

Environment variables:
- TUNECAST_DATA_DIR: Path to the data directory (overrides ~/.tunecast/)
- TUNECAST_CONFIG_PATH: Path to config file (overrides default location)
- TUNECAST_DATABASE_PATH: Path to database file
- TUNECAST_ENABLE_DYNAMIC_PROFILES / TUNECAST_ENABLE_LEARNING /
  TUNECAST_CONSERVATIVE_MODE: Policy switches (true/false)
- TUNECAST_GLOBAL_MAX_BITRATE: Bitrate ceiling in bits/second
- TUNECAST_RETENTION_DAYS: Days of telemetry to keep
- TUNECAST_LOG_LEVEL / TUNECAST_LOG_FILE / TUNECAST_LOG_FORMAT: Logging
"""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import Any

from tunecast.config.builder import (
    ConfigBuilder,
    ConfigSource,
    source_from_env,
    source_from_file,
)
from tunecast.config.env import EnvReader
from tunecast.config.models import TuneCastConfig
from tunecast.config.toml_parser import load_toml_file

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".tunecast"
CONFIG_FILE_NAME = "config.toml"
DATABASE_FILE_NAME = "tunecast.db"

# Cache for loaded config files (path -> (parsed dict, mtime))
_config_cache: dict[Path, tuple[dict[str, Any], float]] = {}
_config_cache_lock = threading.Lock()


def get_data_dir() -> Path:
    """Get the TuneCast data directory.

    Holds the database and the config file. Can be overridden by
    TUNECAST_DATA_DIR (tilde expansion supported).
    """
    env_path = os.environ.get("TUNECAST_DATA_DIR")
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_DIR


def get_default_config_path() -> Path:
    """Get the config file path, honouring TUNECAST_CONFIG_PATH."""
    env_path = os.environ.get("TUNECAST_CONFIG_PATH")
    if env_path:
        return Path(env_path).expanduser()
    return get_data_dir() / CONFIG_FILE_NAME


def get_default_database_path() -> Path:
    """Get the database path used when none is configured."""
    return get_data_dir() / DATABASE_FILE_NAME


def load_config_file(
    path: Path | None = None, *, strict: bool = False
) -> dict[str, Any]:
    """Load configuration from a TOML file.

    Results are cached with mtime-based invalidation, so an edited file is
    re-read on the next call. Thread-safe.

    Args:
        path: Path to config file. If None, uses default location.
        strict: If True, raise TomlParseError on parse failures.

    Returns:
        Parsed configuration dict. Empty dict if file doesn't exist.
    """
    if path is None:
        path = get_default_config_path()

    try:
        current_mtime = path.stat().st_mtime
    except FileNotFoundError:
        current_mtime = 0.0

    with _config_cache_lock:
        cached = _config_cache.get(path)
        if cached is not None and cached[1] == current_mtime:
            return cached[0]

        result = load_toml_file(path, strict=strict)
        _config_cache[path] = (result, current_mtime)
        return result


def clear_config_cache() -> None:
    """Clear the config file cache. Primarily useful for testing."""
    with _config_cache_lock:
        _config_cache.clear()


def get_config(
    config_path: Path | None = None,
    # CLI overrides (highest precedence)
    database_path: Path | None = None,
    enable_dynamic_profiles: bool | None = None,
    enable_learning: bool | None = None,
    conservative_mode: bool | None = None,
    global_max_bitrate_override: int | None = None,
    # Optional dependency injection for testing
    env_reader: EnvReader | None = None,
    *,
    strict: bool = False,
) -> TuneCastConfig:
    """Get TuneCast configuration with full precedence handling.

    Args:
        config_path: Path to config file (overrides TUNECAST_CONFIG_PATH).
        database_path: CLI override for database path.
        enable_dynamic_profiles: CLI override.
        enable_learning: CLI override.
        conservative_mode: CLI override.
        global_max_bitrate_override: CLI override, bits/second.
        env_reader: Optional EnvReader for testing (uses os.environ if None).
        strict: If True, raise TomlParseError on config file parse failures.

    Returns:
        TuneCastConfig with merged configuration. The storage database path
        is always resolved.

    Raises:
        ConfigError: If a merged value is invalid, or (strict only) the
            config file cannot be parsed.
    """
    reader = env_reader or EnvReader()

    file_config = load_config_file(config_path, strict=strict)

    cli_source = ConfigSource(
        database_path=database_path,
        enable_dynamic_profiles=enable_dynamic_profiles,
        enable_learning=enable_learning,
        conservative_mode=conservative_mode,
        global_max_bitrate_override=global_max_bitrate_override,
    )

    # Precedence: file < env < cli
    builder = ConfigBuilder()
    builder.apply(source_from_file(file_config), source_name="file")
    builder.apply(source_from_env(reader), source_name="env")
    builder.apply(cli_source, source_name="cli")
    config = builder.build()

    if config.storage.database_path is None:
        config.storage.database_path = get_default_database_path()

    logger.debug(
        "Loaded config: dynamic_profiles=%s learning=%s conservative=%s",
        config.policy.enable_dynamic_profiles,
        config.policy.enable_learning,
        config.policy.conservative_mode,
    )
    return config
