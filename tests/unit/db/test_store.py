"""Tests for SqliteDataStore."""

import sqlite3
from datetime import timedelta

import pytest

from tunecast.core.datetime_utils import utc_now
from tunecast.db.store import SqliteDataStore
from tunecast.domain.enums import PlaybackResult
from tunecast.domain.models import ClientProfile, InterventionRecord, PlaybackOutcome
from tunecast.exceptions import DatabaseLockedError, StoreError


class TestSqliteDataStore:
    """Tests for the sqlite-backed store."""

    def test_initialize_creates_file(self, store, temp_db):
        """initialize() creates the database up front."""
        store.initialize()

        assert temp_db.exists()

    def test_client_roundtrip(self, store):
        """Clients persist across store instances."""
        store.upsert_client(ClientProfile(device_id="dev-1", codec_confidence={"h264": 0.9}))

        reopened = SqliteDataStore(store.db_path)

        assert reopened.get_client("dev-1").codec_confidence == {"h264": 0.9}
        assert [c.device_id for c in reopened.get_all_clients()] == ["dev-1"]

    def test_record_outcome_assigns_id(self, store):
        """A new outcome gets an id assigned in place."""
        outcome = PlaybackOutcome(device_id="dev-1", play_session_id="ps-1")

        outcome_id = store.record_outcome(outcome)

        assert outcome.id == outcome_id
        assert store.get_outcome_by_session("ps-1").id == outcome_id

    def test_record_outcome_updates_existing(self, store):
        """Recording an outcome with an id updates that row."""
        outcome = PlaybackOutcome(device_id="dev-1", play_session_id="ps-1")
        first_id = store.record_outcome(outcome)

        outcome.result = PlaybackResult.SUCCESS
        second_id = store.record_outcome(outcome)

        assert first_id == second_id
        assert len(store.get_outcomes_by_device("dev-1", 10)) == 1
        assert store.get_outcome_by_session("ps-1").result == PlaybackResult.SUCCESS

    def test_record_outcome_with_stale_id_inserts(self, store):
        """An id with no matching row falls back to an insert."""
        outcome = PlaybackOutcome(device_id="dev-1", id=12345)

        new_id = store.record_outcome(outcome)

        assert new_id != 12345
        assert outcome.id == new_id

    def test_prune_outcomes(self, store):
        """Old outcomes are deleted and counted."""
        now = utc_now()
        store.record_outcome(PlaybackOutcome(device_id="dev-1", timestamp=now - timedelta(days=200)))
        store.record_outcome(PlaybackOutcome(device_id="dev-1", timestamp=now))

        assert store.prune_outcomes(now - timedelta(days=90)) == 1
        assert len(store.get_outcomes_since(now - timedelta(days=365))) == 1

    def test_record_intervention(self, store):
        """Interventions get ids and are listed by time."""
        record = InterventionRecord(
            device_id="dev-1",
            media_source_id="ms-1",
            is_active=True,
            allow_direct_play=False,
            allow_direct_stream=True,
            allow_transcoding=True,
            confidence=0.65,
        )

        record_id = store.record_intervention(record)

        assert record.id == record_id
        assert store.get_interventions_since(utc_now() - timedelta(hours=1))[0].id == record_id

    def test_sqlite_error_wrapped(self, tmp_path):
        """sqlite errors surface as StoreError."""
        bad_path = tmp_path / "not-a-db"
        bad_path.write_bytes(b"this is not a sqlite database" * 100)

        with pytest.raises(StoreError):
            SqliteDataStore(bad_path).get_client("dev-1")

    def test_lock_error_wrapped(self, store, monkeypatch):
        """Lock contention surfaces as DatabaseLockedError."""
        store.initialize()

        def locked(conn, device_id):
            raise sqlite3.OperationalError("database is locked")

        monkeypatch.setattr("tunecast.db.queries.get_client", locked)

        with pytest.raises(DatabaseLockedError):
            store.get_client("dev-1")
