"""Shared test fixtures for TuneCast."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from tunecast.config.loader import clear_config_cache
from tunecast.config.models import PolicyConfig, StorageConfig, TuneCastConfig
from tunecast.db.store import SqliteDataStore
from tunecast.domain.enums import ClientType
from tunecast.domain.models import ClientProfile, MediaCharacteristics
from tunecast.metrics import get_metrics_store


@pytest.fixture(autouse=True)
def tunecast_data_dir(tmp_path: Path):
    """Point TUNECAST_DATA_DIR at a temporary directory for every test.

    Keeps tests away from ~/.tunecast and any real config file.
    """
    data_dir = tmp_path / ".tunecast"
    data_dir.mkdir()
    clear_config_cache()
    with patch.dict(os.environ, {"TUNECAST_DATA_DIR": str(data_dir)}):
        yield data_dir
    clear_config_cache()


@pytest.fixture(autouse=True)
def reset_metrics():
    """Start every test with empty process-wide metrics."""
    get_metrics_store().clear()
    yield
    get_metrics_store().clear()


@pytest.fixture
def temp_db(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "tunecast.db"


@pytest.fixture
def store(temp_db: Path) -> SqliteDataStore:
    """A sqlite store on a fresh temporary database."""
    return SqliteDataStore(temp_db)


@pytest.fixture
def active_config() -> PolicyConfig:
    """Policy config with dynamic profiles and learning on."""
    return PolicyConfig(
        enable_dynamic_profiles=True,
        enable_learning=True,
        conservative_mode=False,
    )


@pytest.fixture
def make_client():
    """Factory for ClientProfile with sensible test defaults."""

    def _make(
        device_id: str = "dev-1",
        client_type: ClientType = ClientType.UNKNOWN,
        **kwargs,
    ) -> ClientProfile:
        return ClientProfile(device_id=device_id, client_type=client_type, **kwargs)

    return _make


@pytest.fixture
def make_media():
    """Factory for MediaCharacteristics with sensible test defaults."""

    def _make(**kwargs) -> MediaCharacteristics:
        kwargs.setdefault("media_source_id", "ms-1")
        kwargs.setdefault("item_id", "item-1")
        return MediaCharacteristics(**kwargs)

    return _make


@pytest.fixture
def runner() -> CliRunner:
    """Click CLI runner."""
    return CliRunner()


@pytest.fixture
def cli_config(temp_db: Path) -> TuneCastConfig:
    """Full config for CLI tests, database under tmp_path."""
    return TuneCastConfig(storage=StorageConfig(database_path=temp_db))


@pytest.fixture
def cli_obj(cli_config: TuneCastConfig, store: SqliteDataStore, monkeypatch) -> dict:
    """Click context object with config and store preloaded.

    Logging setup is skipped so CLI invocations leave the root logger alone.
    """
    monkeypatch.setattr("tunecast.cli._logging_configured", True)
    return {"config": cli_config, "store": store}
