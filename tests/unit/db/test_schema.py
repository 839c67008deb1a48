"""Tests for database schema creation."""

import sqlite3

import pytest

from tunecast.db.schema import (
    SCHEMA_VERSION,
    create_schema,
    get_schema_version,
    initialize_database,
)


@pytest.fixture
def conn():
    connection = sqlite3.connect(":memory:")
    yield connection
    connection.close()


class TestSchema:
    """Tests for create_schema() and initialize_database()."""

    def test_empty_database_has_no_version(self, conn):
        """A fresh database reports no schema version."""
        assert get_schema_version(conn) is None

    def test_create_schema_tables(self, conn):
        """All tables are created and the version is recorded."""
        create_schema(conn)

        tables = {
            row[0]
            for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
        }
        assert {"_meta", "clients", "outcomes", "interventions"} <= tables
        assert get_schema_version(conn) == SCHEMA_VERSION

    def test_initialize_is_idempotent(self, conn):
        """Initializing twice leaves a single version row."""
        initialize_database(conn)
        initialize_database(conn)

        rows = conn.execute("SELECT COUNT(*) FROM _meta").fetchone()
        assert rows[0] == 1

    def test_newer_schema_rejected(self, conn):
        """A database from a newer release is refused."""
        create_schema(conn)
        conn.execute(
            "UPDATE _meta SET value = ? WHERE key = 'schema_version'",
            (str(SCHEMA_VERSION + 1),),
        )
        conn.commit()

        with pytest.raises(sqlite3.DatabaseError, match="newer than supported"):
            initialize_database(conn)
