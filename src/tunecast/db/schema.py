"""Database schema for TuneCast.

Tables:
- clients: one row per device, confidence maps as JSON text
- outcomes: playback telemetry, one row per session
- interventions: policies computed by the advisor
"""

from __future__ import annotations

import sqlite3

SCHEMA_VERSION = 1

SCHEMA_SQL = """
-- Schema version tracking
CREATE TABLE IF NOT EXISTS _meta (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS clients (
    device_id TEXT PRIMARY KEY,
    client_type TEXT NOT NULL DEFAULT 'unknown',
    client_name TEXT NOT NULL DEFAULT '',
    client_version TEXT NOT NULL DEFAULT '',
    device_name TEXT NOT NULL DEFAULT '',
    user_agent TEXT NOT NULL DEFAULT '',
    codec_confidence TEXT NOT NULL DEFAULT '{}',      -- JSON object
    container_confidence TEXT NOT NULL DEFAULT '{}',  -- JSON object
    max_bitrate INTEGER,
    reliability_score REAL NOT NULL DEFAULT 0.5,
    first_seen TEXT NOT NULL,    -- ISO 8601 UTC timestamp
    last_updated TEXT NOT NULL   -- ISO 8601 UTC timestamp
);

CREATE TABLE IF NOT EXISTS outcomes (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    device_id TEXT NOT NULL,
    client_name TEXT NOT NULL DEFAULT '',
    item_id TEXT NOT NULL DEFAULT '',
    play_session_id TEXT NOT NULL DEFAULT '',
    video_codec TEXT NOT NULL DEFAULT '',
    audio_codec TEXT NOT NULL DEFAULT '',
    container TEXT NOT NULL DEFAULT '',
    play_method TEXT NOT NULL DEFAULT 'unknown',
    transcode_reasons TEXT NOT NULL DEFAULT '',
    result TEXT NOT NULL DEFAULT 'unknown',
    played_ticks INTEGER,
    total_ticks INTEGER,
    policy_snapshot TEXT NOT NULL DEFAULT '',  -- JSON text
    timestamp TEXT NOT NULL                    -- ISO 8601 UTC timestamp
);

CREATE INDEX IF NOT EXISTS idx_outcomes_device_timestamp
    ON outcomes(device_id, timestamp DESC);
CREATE INDEX IF NOT EXISTS idx_outcomes_timestamp ON outcomes(timestamp);
CREATE INDEX IF NOT EXISTS idx_outcomes_session ON outcomes(play_session_id);

CREATE TABLE IF NOT EXISTS interventions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    timestamp TEXT NOT NULL,
    device_id TEXT NOT NULL,
    device_name TEXT NOT NULL DEFAULT '',
    client_name TEXT NOT NULL DEFAULT '',
    media_source_id TEXT NOT NULL DEFAULT '',
    is_active INTEGER NOT NULL DEFAULT 0,
    allow_direct_play INTEGER NOT NULL,
    allow_direct_stream INTEGER NOT NULL,
    allow_transcoding INTEGER NOT NULL,
    bitrate_cap INTEGER,
    confidence REAL NOT NULL,
    rationale TEXT NOT NULL DEFAULT ''
);

CREATE INDEX IF NOT EXISTS idx_interventions_timestamp ON interventions(timestamp);
"""


def get_schema_version(conn: sqlite3.Connection) -> int | None:
    """Return the stored schema version, or None for an empty database."""
    try:
        row = conn.execute(
            "SELECT value FROM _meta WHERE key = 'schema_version'"
        ).fetchone()
    except sqlite3.OperationalError:
        # _meta doesn't exist yet
        return None
    return int(row[0]) if row else None


def create_schema(conn: sqlite3.Connection) -> None:
    """Create all tables and indexes if they don't exist."""
    conn.executescript(SCHEMA_SQL)
    conn.execute(
        "INSERT OR IGNORE INTO _meta (key, value) VALUES ('schema_version', ?)",
        (str(SCHEMA_VERSION),),
    )
    # executescript() commits implicitly; the INSERT opens a new transaction
    conn.commit()


def initialize_database(conn: sqlite3.Connection) -> None:
    """Create the schema on a new database; no-op when current.

    Raises:
        sqlite3.DatabaseError: If the database was written by a newer
            TuneCast (schema version above SCHEMA_VERSION).
    """
    version = get_schema_version(conn)
    if version is None:
        create_schema(conn)
    elif version > SCHEMA_VERSION:
        raise sqlite3.DatabaseError(
            f"Database schema v{version} is newer than supported v{SCHEMA_VERSION}"
        )
