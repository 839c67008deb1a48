"""Configuration builder with explicit layering.

ConfigBuilder composes TuneCastConfig from several ConfigSources. Sources
applied later override earlier ones for every value they specify.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from tunecast.config.env import EnvReader
from tunecast.config.models import (
    LoggingConfig,
    PolicyConfig,
    StorageConfig,
    TuneCastConfig,
)
from tunecast.exceptions import ConfigError


@dataclass
class ConfigSource:
    """Configuration values from a single source.

    None values indicate "not specified in this source" and do not
    override values from lower-precedence sources.
    """

    # Policy
    enable_dynamic_profiles: bool | None = None
    enable_learning: bool | None = None
    conservative_mode: bool | None = None
    global_max_bitrate_override: int | None = None
    retention_days: int | None = None
    recalibration_window: int | None = None

    # Storage
    database_path: Path | None = None

    # Logging
    logging_level: str | None = None
    logging_file: Path | None = None
    logging_format: str | None = None
    logging_include_stderr: bool | None = None
    logging_max_bytes: int | None = None
    logging_backup_count: int | None = None


class ConfigBuilder:
    """Builds TuneCastConfig by layering ConfigSources with precedence.

    Example:
        builder = ConfigBuilder()
        builder.apply(source_from_file(file_config), source_name="file")
        builder.apply(source_from_env(reader), source_name="env")
        builder.apply(cli_source, source_name="cli")
        config = builder.build()
    """

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}
        self._origins: dict[str, str] = {}

    def apply(self, source: ConfigSource, source_name: str = "unknown") -> None:
        """Apply a configuration source, overriding existing values.

        Args:
            source: Configuration source to apply.
            source_name: Label recorded for each value, used in errors.
        """
        for field_obj in fields(source):
            value = getattr(source, field_obj.name)
            if value is not None:
                self._values[field_obj.name] = value
                self._origins[field_obj.name] = source_name

    def origin(self, key: str) -> str:
        """Return which source supplied a value ("default" if none did)."""
        return self._origins.get(key, "default")

    def _get(self, key: str, default: Any) -> Any:
        return self._values.get(key, default)

    def build(self) -> TuneCastConfig:
        """Build the final TuneCastConfig with defaults for unset values.

        Raises:
            ConfigError: If the merged values fail validation.
        """
        try:
            policy = PolicyConfig(
                enable_dynamic_profiles=bool(
                    self._get("enable_dynamic_profiles", False)
                ),
                enable_learning=bool(self._get("enable_learning", False)),
                conservative_mode=bool(self._get("conservative_mode", True)),
                # 0 means "no override"
                global_max_bitrate_override=(
                    self._get("global_max_bitrate_override", None) or None
                ),
                retention_days=self._get("retention_days", 90),
                recalibration_window=self._get("recalibration_window", 500),
            )
            logging_config = LoggingConfig(
                level=self._get("logging_level", "info"),
                file=self._get("logging_file", None),
                format=self._get("logging_format", "text"),
                include_stderr=self._get("logging_include_stderr", False),
                max_bytes=self._get("logging_max_bytes", 10_485_760),
                backup_count=self._get("logging_backup_count", 5),
            )
        except ConfigError as e:
            sources = ", ".join(
                f"{key} from {origin}" for key, origin in sorted(self._origins.items())
            )
            raise ConfigError(f"{e} ({sources or 'defaults only'})") from e

        storage = StorageConfig(database_path=self._get("database_path", None))

        return TuneCastConfig(policy=policy, logging=logging_config, storage=storage)


def _optional_path(value: Any) -> Path | None:
    return Path(value).expanduser() if value else None


def _typed(section: dict[str, Any], key: str, kind: type, where: str) -> Any:
    value = section.get(key)
    if value is None:
        return None
    # bool is an int subclass; reject it where an int is expected
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise ConfigError(
            f"[{where}] {key} must be {kind.__name__}, got {type(value).__name__}"
        )
    return value


def source_from_file(file_config: dict[str, Any]) -> ConfigSource:
    """Create ConfigSource from a parsed TOML config file.

    Recognized sections: [policy], [storage], [logging].

    Raises:
        ConfigError: If a value has the wrong type.
    """
    policy = file_config.get("policy", {})
    storage = file_config.get("storage", {})
    logging_conf = file_config.get("logging", {})

    return ConfigSource(
        enable_dynamic_profiles=_typed(
            policy, "enable_dynamic_profiles", bool, "policy"
        ),
        enable_learning=_typed(policy, "enable_learning", bool, "policy"),
        conservative_mode=_typed(policy, "conservative_mode", bool, "policy"),
        global_max_bitrate_override=_typed(
            policy, "global_max_bitrate_override", int, "policy"
        ),
        retention_days=_typed(policy, "retention_days", int, "policy"),
        recalibration_window=_typed(policy, "recalibration_window", int, "policy"),
        database_path=_optional_path(storage.get("database_path")),
        logging_level=_typed(logging_conf, "level", str, "logging"),
        logging_file=_optional_path(logging_conf.get("file")),
        logging_format=_typed(logging_conf, "format", str, "logging"),
        logging_include_stderr=_typed(logging_conf, "include_stderr", bool, "logging"),
        logging_max_bytes=_typed(logging_conf, "max_bytes", int, "logging"),
        logging_backup_count=_typed(logging_conf, "backup_count", int, "logging"),
    )


def source_from_env(reader: EnvReader) -> ConfigSource:
    """Create ConfigSource from TUNECAST_* environment variables."""
    return ConfigSource(
        enable_dynamic_profiles=reader.get_bool("TUNECAST_ENABLE_DYNAMIC_PROFILES"),
        enable_learning=reader.get_bool("TUNECAST_ENABLE_LEARNING"),
        conservative_mode=reader.get_bool("TUNECAST_CONSERVATIVE_MODE"),
        global_max_bitrate_override=reader.get_int("TUNECAST_GLOBAL_MAX_BITRATE"),
        retention_days=reader.get_int("TUNECAST_RETENTION_DAYS"),
        database_path=reader.get_path("TUNECAST_DATABASE_PATH"),
        logging_level=reader.get_str("TUNECAST_LOG_LEVEL"),
        logging_file=reader.get_path("TUNECAST_LOG_FILE"),
        logging_format=reader.get_str("TUNECAST_LOG_FORMAT"),
    )
