"""Database module for TuneCast.

Module organization:
- connection.py: Connection settings, write transactions and lock retries
- schema.py: Schema creation and version tracking
- queries.py: Row mapping and CRUD for clients, outcomes and interventions
- store.py: DataStore protocol and the sqlite implementation services use

Usage:
    from tunecast.db import SqliteDataStore
    store = SqliteDataStore(config.storage.database_path)
"""

from .connection import (
    ensure_db_directory,
    execute_with_retry,
    get_connection,
    write_transaction,
)
from .schema import SCHEMA_VERSION, create_schema, initialize_database
from .store import DataStore, SqliteDataStore

__all__ = [
    "DataStore",
    "SqliteDataStore",
    "SCHEMA_VERSION",
    "create_schema",
    "initialize_database",
    "ensure_db_directory",
    "execute_with_retry",
    "get_connection",
    "write_transaction",
]
