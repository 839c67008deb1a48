"""Configuration data models.

This module defines dataclasses for TuneCast configuration options. Each
model validates itself in __post_init__ and raises ConfigError on bad input.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from tunecast.exceptions import ConfigError


@dataclass(frozen=True)
class PolicyConfig:
    """Operator settings consumed by the decision engine and learning.

    With conservative_mode on and enable_dynamic_profiles off, the engine
    returns the pass-through policy without evaluating any rule.
    """

    enable_dynamic_profiles: bool = False
    """Apply computed policies instead of only recording them (dry run)."""

    enable_learning: bool = False
    """Update client confidence from playback outcomes."""

    conservative_mode: bool = True
    """Prefer the host's own decisions unless dynamic profiles are enabled."""

    global_max_bitrate_override: int | None = None
    """Bitrate ceiling (bits/second) applied to every client when set."""

    retention_days: int = 90
    """Days of playback telemetry to keep."""

    recalibration_window: int = 500
    """Number of most recent outcomes a recalibration considers."""

    def __post_init__(self) -> None:
        """Validate configuration."""
        if (
            self.global_max_bitrate_override is not None
            and self.global_max_bitrate_override <= 0
        ):
            raise ConfigError(
                "global_max_bitrate_override must be positive, "
                f"got {self.global_max_bitrate_override}"
            )
        if self.retention_days < 1:
            raise ConfigError(
                f"retention_days must be at least 1, got {self.retention_days}"
            )
        if self.recalibration_window < 1:
            raise ConfigError(
                "recalibration_window must be at least 1, "
                f"got {self.recalibration_window}"
            )


@dataclass
class LoggingConfig:
    """Configuration for structured logging."""

    # Log level: debug, info, warning, error
    level: str = "info"

    # Log file path (None = stderr only)
    file: Path | None = None

    # Log format: text or json
    format: str = "text"

    # Also log to stderr when file is set
    include_stderr: bool = False

    # Rotation threshold in bytes (default 10MB)
    max_bytes: int = 10_485_760

    # Number of rotated files to keep
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate configuration."""
        valid_levels = {"debug", "info", "warning", "error"}
        if self.level.lower() not in valid_levels:
            raise ConfigError(
                f"level must be one of {sorted(valid_levels)}, got {self.level}"
            )
        valid_formats = {"text", "json"}
        if self.format.lower() not in valid_formats:
            raise ConfigError(
                f"format must be one of {sorted(valid_formats)}, got {self.format}"
            )
        if self.max_bytes < 1:
            raise ConfigError(f"max_bytes must be positive, got {self.max_bytes}")
        if self.backup_count < 0:
            raise ConfigError(
                f"backup_count must be non-negative, got {self.backup_count}"
            )


@dataclass
class StorageConfig:
    """Configuration for the telemetry/client database."""

    # None = <data dir>/tunecast.db
    database_path: Path | None = None


@dataclass
class TuneCastConfig:
    """Complete TuneCast configuration."""

    policy: PolicyConfig = field(default_factory=PolicyConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
