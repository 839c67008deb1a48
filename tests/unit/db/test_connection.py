"""Tests for connection helpers."""

import sqlite3
from unittest.mock import patch

import pytest

from tunecast.db.connection import execute_with_retry, get_connection, write_transaction


class TestGetConnection:
    """Tests for get_connection()."""

    def test_creates_parent_directory(self, tmp_path):
        """Missing parent directories are created."""
        db_path = tmp_path / "nested" / "dir" / "tunecast.db"

        with get_connection(db_path) as conn:
            conn.execute("SELECT 1")

        assert db_path.parent.is_dir()

    def test_rows_are_mappings(self, temp_db):
        """Rows support access by column name."""
        with get_connection(temp_db) as conn:
            row = conn.execute("SELECT 1 AS one").fetchone()

        assert row["one"] == 1


class TestWriteTransaction:
    """Tests for write_transaction()."""

    def test_commits_on_success(self, temp_db):
        """Writes inside the block are committed."""
        with get_connection(temp_db) as conn:
            conn.execute("CREATE TABLE t (x INTEGER)")
            with write_transaction(conn):
                conn.execute("INSERT INTO t VALUES (1)")

        with get_connection(temp_db) as conn:
            assert conn.execute("SELECT COUNT(*) FROM t").fetchone()[0] == 1

    def test_rolls_back_on_error(self, temp_db):
        """Writes are discarded when the block raises."""
        with get_connection(temp_db) as conn:
            conn.execute("CREATE TABLE t (x INTEGER)")
            with pytest.raises(RuntimeError):
                with write_transaction(conn):
                    conn.execute("INSERT INTO t VALUES (1)")
                    raise RuntimeError("abort")

            assert conn.execute("SELECT COUNT(*) FROM t").fetchone()[0] == 0


class TestExecuteWithRetry:
    """Tests for execute_with_retry()."""

    def test_returns_result(self):
        """A successful call returns its value."""
        assert execute_with_retry(lambda: 42) == 42

    @patch("tunecast.db.connection.time.sleep")
    def test_retries_lock_errors(self, mock_sleep):
        """Lock errors are retried until the call succeeds."""
        calls = []

        def flaky():
            calls.append(1)
            if len(calls) < 3:
                raise sqlite3.OperationalError("database is locked")
            return "ok"

        assert execute_with_retry(flaky) == "ok"
        assert len(calls) == 3
        assert mock_sleep.call_count == 2

    @patch("tunecast.db.connection.time.sleep")
    def test_gives_up_after_max_retries(self, mock_sleep):
        """Persistent lock errors are re-raised once retries run out."""

        def locked():
            raise sqlite3.OperationalError("database is busy")

        with pytest.raises(sqlite3.OperationalError):
            execute_with_retry(locked, max_retries=2)

        assert mock_sleep.call_count == 2

    def test_other_errors_not_retried(self):
        """Non-lock errors propagate immediately."""
        calls = []

        def broken():
            calls.append(1)
            raise sqlite3.OperationalError("no such table: t")

        with pytest.raises(sqlite3.OperationalError, match="no such table"):
            execute_with_retry(broken)

        assert len(calls) == 1
