"""Tests for configuration dataclasses."""

import dataclasses

import pytest

from tunecast.config.models import LoggingConfig, PolicyConfig, TuneCastConfig
from tunecast.exceptions import ConfigError


class TestPolicyConfig:
    """Tests for PolicyConfig validation."""

    def test_defaults_are_conservative(self):
        """Out of the box nothing is applied and nothing is learned."""
        config = PolicyConfig()

        assert config.enable_dynamic_profiles is False
        assert config.enable_learning is False
        assert config.conservative_mode is True
        assert config.global_max_bitrate_override is None
        assert config.retention_days == 90

    def test_frozen(self):
        """Policy settings are immutable once built."""
        config = PolicyConfig()

        with pytest.raises(dataclasses.FrozenInstanceError):
            config.enable_learning = True

    @pytest.mark.parametrize(
        "kwargs,message",
        [
            ({"global_max_bitrate_override": 0}, "global_max_bitrate_override"),
            ({"global_max_bitrate_override": -1}, "global_max_bitrate_override"),
            ({"retention_days": 0}, "retention_days"),
            ({"recalibration_window": 0}, "recalibration_window"),
        ],
    )
    def test_invalid_values(self, kwargs, message):
        """Out-of-range values raise ConfigError naming the field."""
        with pytest.raises(ConfigError, match=message):
            PolicyConfig(**kwargs)

    def test_config_error_is_value_error(self):
        """ConfigError can be caught as ValueError."""
        with pytest.raises(ValueError):
            PolicyConfig(retention_days=-3)


class TestLoggingConfig:
    """Tests for LoggingConfig validation."""

    def test_level_case_insensitive(self):
        """Levels are accepted in any case."""
        assert LoggingConfig(level="DEBUG").level == "DEBUG"

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"level": "verbose"},
            {"format": "xml"},
            {"max_bytes": 0},
            {"backup_count": -1},
        ],
    )
    def test_invalid_values(self, kwargs):
        """Invalid logging values raise ConfigError."""
        with pytest.raises(ConfigError):
            LoggingConfig(**kwargs)


class TestTuneCastConfig:
    """Tests for the top-level config."""

    def test_default_sections(self):
        """Every section has defaults."""
        config = TuneCastConfig()

        assert config.policy == PolicyConfig()
        assert config.logging.format == "text"
        assert config.storage.database_path is None
