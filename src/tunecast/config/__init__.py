"""Configuration management for TuneCast.

Configuration is loaded with precedence handling:
1. CLI flags (highest priority)
2. Environment variables (TUNECAST_*)
3. Config file (~/.tunecast/config.toml)
4. Default values (lowest priority)
"""

from tunecast.config.builder import (
    ConfigBuilder,
    ConfigSource,
    source_from_env,
    source_from_file,
)
from tunecast.config.env import EnvReader
from tunecast.config.loader import (
    clear_config_cache,
    get_config,
    get_data_dir,
    get_default_config_path,
    get_default_database_path,
    load_config_file,
)
from tunecast.config.models import (
    LoggingConfig,
    PolicyConfig,
    StorageConfig,
    TuneCastConfig,
)
from tunecast.config.toml_parser import TomlParseError, load_toml_file, parse_toml

__all__ = [
    # Models
    "LoggingConfig",
    "PolicyConfig",
    "StorageConfig",
    "TuneCastConfig",
    # Loader
    "clear_config_cache",
    "get_config",
    "get_data_dir",
    "get_default_config_path",
    "get_default_database_path",
    "load_config_file",
    # Building blocks
    "ConfigBuilder",
    "ConfigSource",
    "EnvReader",
    "source_from_env",
    "source_from_file",
    # TOML
    "TomlParseError",
    "load_toml_file",
    "parse_toml",
]
