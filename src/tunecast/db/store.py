"""Persistent store for clients, outcomes and interventions.

DataStore is the interface the services depend on. SqliteDataStore opens a
connection per operation, so one instance is safe to share across threads;
writes run in BEGIN IMMEDIATE transactions retried on lock contention.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Protocol, TypeVar

from tunecast.db import queries
from tunecast.db.connection import execute_with_retry, get_connection, write_transaction
from tunecast.db.schema import initialize_database
from tunecast.domain.models import ClientProfile, InterventionRecord, PlaybackOutcome
from tunecast.exceptions import DatabaseLockedError, StoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DataStore(Protocol):
    """Protocol for TuneCast persistence.

    Implementations raise StoreError when an operation cannot complete.
    """

    def get_client(self, device_id: str) -> ClientProfile | None:
        """Return the stored client, or None if unknown."""
        ...

    def upsert_client(self, client: ClientProfile) -> None:
        """Insert or replace a client by device id."""
        ...

    def get_all_clients(self) -> list[ClientProfile]:
        """Return every stored client."""
        ...

    def record_outcome(self, outcome: PlaybackOutcome) -> int:
        """Insert the outcome (id None) or update it by id. Returns the id."""
        ...

    def get_outcome_by_session(self, play_session_id: str) -> PlaybackOutcome | None:
        """Return the latest outcome recorded for a play session."""
        ...

    def get_outcomes_by_device(
        self, device_id: str, limit: int
    ) -> list[PlaybackOutcome]:
        """Return up to `limit` outcomes for a device, newest first."""
        ...

    def get_outcomes_since(self, since: datetime) -> list[PlaybackOutcome]:
        """Return outcomes recorded at or after `since`."""
        ...

    def prune_outcomes(self, older_than: datetime) -> int:
        """Delete outcomes older than the cutoff. Returns rows deleted."""
        ...

    def record_intervention(self, record: InterventionRecord) -> int:
        """Insert an intervention record. Returns its id."""
        ...

    def get_interventions_since(self, since: datetime) -> list[InterventionRecord]:
        """Return interventions recorded at or after `since`."""
        ...


class SqliteDataStore:
    """sqlite3-backed DataStore."""

    def __init__(self, db_path: Path, timeout: float = 30.0) -> None:
        self.db_path = Path(db_path)
        self.timeout = timeout
        self._initialized = False
        self._init_lock = threading.Lock()

    def _ensure_schema(self, conn: sqlite3.Connection) -> None:
        if self._initialized:
            return
        with self._init_lock:
            if not self._initialized:
                initialize_database(conn)
                self._initialized = True

    def _run(self, operation: str, func: Callable[[sqlite3.Connection], T]) -> T:
        try:
            with get_connection(self.db_path, timeout=self.timeout) as conn:
                self._ensure_schema(conn)
                return func(conn)
        except sqlite3.OperationalError as e:
            message = str(e).casefold()
            if "locked" in message or "busy" in message:
                raise DatabaseLockedError(
                    f"{operation}: database is locked. Another process may be using it."
                ) from e
            raise StoreError(f"{operation} failed: {e}") from e
        except sqlite3.Error as e:
            raise StoreError(f"{operation} failed: {e}") from e

    def _write(self, operation: str, func: Callable[[sqlite3.Connection], T]) -> T:
        def in_transaction(conn: sqlite3.Connection) -> T:
            def attempt() -> T:
                with write_transaction(conn):
                    return func(conn)

            return execute_with_retry(attempt)

        return self._run(operation, in_transaction)

    def initialize(self) -> None:
        """Create the schema now instead of on first use."""
        self._run("initialize", lambda conn: None)

    # Clients

    def get_client(self, device_id: str) -> ClientProfile | None:
        return self._run("get_client", lambda conn: queries.get_client(conn, device_id))

    def upsert_client(self, client: ClientProfile) -> None:
        self._write("upsert_client", lambda conn: queries.upsert_client(conn, client))

    def get_all_clients(self) -> list[ClientProfile]:
        return self._run("get_all_clients", queries.get_all_clients)

    # Outcomes

    def record_outcome(self, outcome: PlaybackOutcome) -> int:
        def do_record(conn: sqlite3.Connection) -> int:
            if outcome.id is not None and queries.update_outcome(conn, outcome):
                return outcome.id
            return queries.insert_outcome(conn, outcome)

        outcome.id = self._write("record_outcome", do_record)
        return outcome.id

    def get_outcome_by_session(self, play_session_id: str) -> PlaybackOutcome | None:
        return self._run(
            "get_outcome_by_session",
            lambda conn: queries.get_outcome_by_session(conn, play_session_id),
        )

    def get_outcomes_by_device(
        self, device_id: str, limit: int
    ) -> list[PlaybackOutcome]:
        return self._run(
            "get_outcomes_by_device",
            lambda conn: queries.get_outcomes_by_device(conn, device_id, limit),
        )

    def get_outcomes_since(self, since: datetime) -> list[PlaybackOutcome]:
        return self._run(
            "get_outcomes_since", lambda conn: queries.get_outcomes_since(conn, since)
        )

    def prune_outcomes(self, older_than: datetime) -> int:
        deleted = self._write(
            "prune_outcomes",
            lambda conn: queries.delete_outcomes_before(conn, older_than),
        )
        logger.info("Pruned %d outcomes older than %s", deleted, older_than.isoformat())
        return deleted

    # Interventions

    def record_intervention(self, record: InterventionRecord) -> int:
        record.id = self._write(
            "record_intervention",
            lambda conn: queries.insert_intervention(conn, record),
        )
        return record.id

    def get_interventions_since(self, since: datetime) -> list[InterventionRecord]:
        return self._run(
            "get_interventions_since",
            lambda conn: queries.get_interventions_since(conn, since),
        )
