"""Database connection management for TuneCast."""

from __future__ import annotations

import logging
import random
import sqlite3
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def ensure_db_directory(db_path: Path) -> None:
    """Ensure the database directory exists, creating it if necessary."""
    db_path.parent.mkdir(parents=True, exist_ok=True)


@contextmanager
def get_connection(db_path: Path, timeout: float = 30.0) -> Iterator[sqlite3.Connection]:
    """Open a database connection with TuneCast's settings.

    WAL journal, foreign keys on, NORMAL sync, 10s busy timeout, rows as
    sqlite3.Row. The connection is closed on exit.

    Args:
        db_path: Path to the database file.
        timeout: How long to wait for locks (seconds).

    Yields:
        An sqlite3 Connection object.
    """
    ensure_db_directory(db_path)
    conn = sqlite3.connect(str(db_path), timeout=timeout)
    try:
        conn.execute("PRAGMA foreign_keys = ON")
        conn.execute("PRAGMA journal_mode = WAL")
        conn.execute("PRAGMA synchronous = NORMAL")
        conn.execute("PRAGMA busy_timeout = 10000")
        conn.execute("PRAGMA temp_store = MEMORY")
        conn.row_factory = sqlite3.Row
        yield conn
    finally:
        conn.close()


@contextmanager
def write_transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """Run the block in a BEGIN IMMEDIATE transaction.

    Commits on success and rolls back on any exception.
    """
    conn.execute("BEGIN IMMEDIATE")
    try:
        yield conn
    except BaseException:
        conn.execute("ROLLBACK")
        raise
    conn.execute("COMMIT")


def _is_lock_error(error: sqlite3.OperationalError) -> bool:
    message = str(error).casefold()
    return "locked" in message or "busy" in message


def execute_with_retry(
    func: Callable[[], T],
    max_retries: int = 5,
    base_delay: float = 0.1,
    max_delay: float = 5.0,
    jitter: float = 0.1,
) -> T:
    """Execute a function, retrying with exponential backoff on lock errors.

    Args:
        func: Function to execute. Lock contention must surface as
            sqlite3.OperationalError mentioning "locked" or "busy".
        max_retries: Maximum number of retry attempts.
        base_delay: Initial delay in seconds.
        max_delay: Maximum delay between retries.
        jitter: Random jitter factor (0-1).

    Returns:
        The return value of func.

    Raises:
        sqlite3.OperationalError: If retries are exhausted or the error is
            not a lock error.
    """
    delay = base_delay
    attempt = 0
    while True:
        try:
            result = func()
        except sqlite3.OperationalError as e:
            if not _is_lock_error(e) or attempt >= max_retries:
                if attempt >= max_retries:
                    logger.warning(
                        "Database lock retry exhausted after %d attempts: %s",
                        attempt + 1,
                        e,
                    )
                raise
            jittered = delay * (1 + random.uniform(-jitter, jitter))  # nosec B311
            logger.info(
                "Database locked (attempt %d/%d), retrying in %.2fs: %s",
                attempt + 1,
                max_retries + 1,
                jittered,
                e,
            )
            time.sleep(jittered)
            delay = min(delay * 2, max_delay)
            attempt += 1
            continue

        if attempt > 0:
            logger.info("Database operation succeeded after %d retries", attempt)
        return result
