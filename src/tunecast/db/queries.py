"""Query functions for the TuneCast database.

Row mapping between sqlite rows and domain dataclasses, plus CRUD for
clients, outcomes and interventions.

None of these functions commit. Callers manage transactions.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime

from tunecast.core.datetime_utils import parse_iso_timestamp, to_iso
from tunecast.domain.enums import ClientType, PlaybackResult, PlayMethod
from tunecast.domain.models import ClientProfile, InterventionRecord, PlaybackOutcome

logger = logging.getLogger(__name__)


def _load_confidence(raw: str | None, device_id: str, column: str) -> dict[str, float]:
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Corrupt %s for client %s, treating as empty", column, device_id)
        return {}
    return {str(k): float(v) for k, v in data.items()}


def _parse_result(value: str) -> PlaybackResult:
    try:
        return PlaybackResult(value)
    except ValueError:
        return PlaybackResult.UNKNOWN


# ==========================================================================
# Row mapping
# ==========================================================================


def _row_to_client(row: sqlite3.Row) -> ClientProfile:
    device_id = row["device_id"]
    return ClientProfile(
        device_id=device_id,
        client_type=ClientType.from_string(row["client_type"]),
        client_name=row["client_name"],
        client_version=row["client_version"],
        device_name=row["device_name"],
        user_agent=row["user_agent"],
        codec_confidence=_load_confidence(
            row["codec_confidence"], device_id, "codec_confidence"
        ),
        container_confidence=_load_confidence(
            row["container_confidence"], device_id, "container_confidence"
        ),
        max_bitrate=row["max_bitrate"],
        reliability_score=row["reliability_score"],
        first_seen=parse_iso_timestamp(row["first_seen"]),
        last_updated=parse_iso_timestamp(row["last_updated"]),
    )


def _row_to_outcome(row: sqlite3.Row) -> PlaybackOutcome:
    return PlaybackOutcome(
        id=row["id"],
        device_id=row["device_id"],
        client_name=row["client_name"],
        item_id=row["item_id"],
        play_session_id=row["play_session_id"],
        video_codec=row["video_codec"],
        audio_codec=row["audio_codec"],
        container=row["container"],
        play_method=PlayMethod.parse(row["play_method"]),
        transcode_reasons=row["transcode_reasons"],
        result=_parse_result(row["result"]),
        played_ticks=row["played_ticks"],
        total_ticks=row["total_ticks"],
        policy_snapshot=row["policy_snapshot"],
        timestamp=parse_iso_timestamp(row["timestamp"]),
    )


def _row_to_intervention(row: sqlite3.Row) -> InterventionRecord:
    return InterventionRecord(
        id=row["id"],
        timestamp=parse_iso_timestamp(row["timestamp"]),
        device_id=row["device_id"],
        device_name=row["device_name"],
        client_name=row["client_name"],
        media_source_id=row["media_source_id"],
        is_active=bool(row["is_active"]),
        allow_direct_play=bool(row["allow_direct_play"]),
        allow_direct_stream=bool(row["allow_direct_stream"]),
        allow_transcoding=bool(row["allow_transcoding"]),
        bitrate_cap=row["bitrate_cap"],
        confidence=row["confidence"],
        rationale=row["rationale"],
    )


# ==========================================================================
# Clients
# ==========================================================================


def get_client(conn: sqlite3.Connection, device_id: str) -> ClientProfile | None:
    """Get a client by device id, or None if unknown."""
    row = conn.execute(
        "SELECT * FROM clients WHERE device_id = ?", (device_id,)
    ).fetchone()
    return _row_to_client(row) if row else None


def get_all_clients(conn: sqlite3.Connection) -> list[ClientProfile]:
    """Get every stored client, most recently updated first."""
    rows = conn.execute("SELECT * FROM clients ORDER BY last_updated DESC").fetchall()
    return [_row_to_client(row) for row in rows]


def upsert_client(conn: sqlite3.Connection, client: ClientProfile) -> None:
    """Insert or replace a client (upsert by device id).

    first_seen is kept from the existing row.
    """
    conn.execute(
        """
        INSERT INTO clients (
            device_id, client_type, client_name, client_version, device_name,
            user_agent, codec_confidence, container_confidence, max_bitrate,
            reliability_score, first_seen, last_updated
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT(device_id) DO UPDATE SET
            client_type = excluded.client_type,
            client_name = excluded.client_name,
            client_version = excluded.client_version,
            device_name = excluded.device_name,
            user_agent = excluded.user_agent,
            codec_confidence = excluded.codec_confidence,
            container_confidence = excluded.container_confidence,
            max_bitrate = excluded.max_bitrate,
            reliability_score = excluded.reliability_score,
            last_updated = excluded.last_updated
        """,
        (
            client.device_id,
            client.client_type.value,
            client.client_name,
            client.client_version,
            client.device_name,
            client.user_agent,
            json.dumps(client.codec_confidence, sort_keys=True),
            json.dumps(client.container_confidence, sort_keys=True),
            client.max_bitrate,
            client.reliability_score,
            to_iso(client.first_seen),
            to_iso(client.last_updated),
        ),
    )


# ==========================================================================
# Outcomes
# ==========================================================================


def _outcome_params(outcome: PlaybackOutcome) -> tuple:
    return (
        outcome.device_id,
        outcome.client_name,
        outcome.item_id,
        outcome.play_session_id,
        outcome.video_codec,
        outcome.audio_codec,
        outcome.container,
        outcome.play_method.value,
        outcome.transcode_reasons,
        outcome.result.value,
        outcome.played_ticks,
        outcome.total_ticks,
        outcome.policy_snapshot,
        to_iso(outcome.timestamp),
    )


def insert_outcome(conn: sqlite3.Connection, outcome: PlaybackOutcome) -> int:
    """Insert an outcome and return its new id."""
    cursor = conn.execute(
        """
        INSERT INTO outcomes (
            device_id, client_name, item_id, play_session_id, video_codec,
            audio_codec, container, play_method, transcode_reasons, result,
            played_ticks, total_ticks, policy_snapshot, timestamp
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        _outcome_params(outcome),
    )
    return cursor.lastrowid


def update_outcome(conn: sqlite3.Connection, outcome: PlaybackOutcome) -> bool:
    """Update an existing outcome by id. Returns False if no row matched."""
    cursor = conn.execute(
        """
        UPDATE outcomes SET
            device_id = ?, client_name = ?, item_id = ?, play_session_id = ?,
            video_codec = ?, audio_codec = ?, container = ?, play_method = ?,
            transcode_reasons = ?, result = ?, played_ticks = ?,
            total_ticks = ?, policy_snapshot = ?, timestamp = ?
        WHERE id = ?
        """,
        (*_outcome_params(outcome), outcome.id),
    )
    return cursor.rowcount > 0


def get_outcome_by_session(
    conn: sqlite3.Connection, play_session_id: str
) -> PlaybackOutcome | None:
    """Get the most recent outcome for a play session."""
    row = conn.execute(
        """
        SELECT * FROM outcomes WHERE play_session_id = ?
        ORDER BY timestamp DESC, id DESC LIMIT 1
        """,
        (play_session_id,),
    ).fetchone()
    return _row_to_outcome(row) if row else None


def get_outcomes_by_device(
    conn: sqlite3.Connection, device_id: str, limit: int
) -> list[PlaybackOutcome]:
    """Get up to `limit` outcomes for a device, newest first."""
    rows = conn.execute(
        """
        SELECT * FROM outcomes WHERE device_id = ?
        ORDER BY timestamp DESC, id DESC LIMIT ?
        """,
        (device_id, limit),
    ).fetchall()
    return [_row_to_outcome(row) for row in rows]


def get_outcomes_since(
    conn: sqlite3.Connection, since: datetime
) -> list[PlaybackOutcome]:
    """Get outcomes at or after `since`, oldest first."""
    rows = conn.execute(
        "SELECT * FROM outcomes WHERE timestamp >= ? ORDER BY timestamp, id",
        (to_iso(since),),
    ).fetchall()
    return [_row_to_outcome(row) for row in rows]


def delete_outcomes_before(conn: sqlite3.Connection, cutoff: datetime) -> int:
    """Delete outcomes older than `cutoff`. Returns rows deleted."""
    cursor = conn.execute(
        "DELETE FROM outcomes WHERE timestamp < ?", (to_iso(cutoff),)
    )
    return cursor.rowcount


# ==========================================================================
# Interventions
# ==========================================================================


def insert_intervention(conn: sqlite3.Connection, record: InterventionRecord) -> int:
    """Insert an intervention record and return its id."""
    cursor = conn.execute(
        """
        INSERT INTO interventions (
            timestamp, device_id, device_name, client_name, media_source_id,
            is_active, allow_direct_play, allow_direct_stream,
            allow_transcoding, bitrate_cap, confidence, rationale
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            to_iso(record.timestamp),
            record.device_id,
            record.device_name,
            record.client_name,
            record.media_source_id,
            int(record.is_active),
            int(record.allow_direct_play),
            int(record.allow_direct_stream),
            int(record.allow_transcoding),
            record.bitrate_cap,
            record.confidence,
            record.rationale,
        ),
    )
    return cursor.lastrowid


def get_interventions_since(
    conn: sqlite3.Connection, since: datetime
) -> list[InterventionRecord]:
    """Get interventions at or after `since`, oldest first."""
    rows = conn.execute(
        "SELECT * FROM interventions WHERE timestamp >= ? ORDER BY timestamp, id",
        (to_iso(since),),
    ).fetchall()
    return [_row_to_intervention(row) for row in rows]
