"""Playback telemetry recording.

One outcome row per play session: written at playback start with the
policy snapshot, completed at playback stop with the progress ticks and a
classified result. The rows are the ground truth the learning component
feeds on.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from tunecast.config.models import PolicyConfig
from tunecast.core.datetime_utils import utc_now
from tunecast.db.store import DataStore
from tunecast.domain.enums import PlaybackResult, PlayMethod
from tunecast.domain.models import (
    ClientProfile,
    MediaCharacteristics,
    PlaybackOutcome,
    PlaybackPolicy,
)
from tunecast.learning.classify import classify_outcome, compute_playback_ratio

logger = logging.getLogger(__name__)

# A transcode abandoned before this share of the runtime counts as failed
TRANSCODE_ABANDON_RATIO = 0.02


class TelemetryService:
    """Records playback sessions to the store.

    Store failures propagate as StoreError; callers at the event boundary
    decide whether to swallow them.
    """

    def __init__(self, store: DataStore, config: PolicyConfig) -> None:
        self.store = store
        self.config = config

    def record_playback_start(
        self,
        client: ClientProfile,
        media: MediaCharacteristics,
        policy: PlaybackPolicy,
        play_session_id: str,
        play_method: PlayMethod | str,
        transcode_reasons: str = "",
    ) -> PlaybackOutcome:
        """Persist the start of a session and return the stored outcome.

        A session that starts as a transcode is recorded as TRANSCODED right
        away; anything else stays UNKNOWN until it stops.
        """
        method = PlayMethod.parse(play_method)
        outcome = PlaybackOutcome(
            device_id=client.device_id,
            client_name=client.client_name,
            item_id=media.item_id,
            play_session_id=play_session_id,
            video_codec=media.video_codec,
            audio_codec=media.audio_codec,
            container=media.container,
            play_method=method,
            transcode_reasons=transcode_reasons,
            result=(
                PlaybackResult.TRANSCODED
                if method is PlayMethod.TRANSCODE
                else PlaybackResult.UNKNOWN
            ),
            policy_snapshot=policy.to_json(),
        )
        self.store.record_outcome(outcome)

        logger.info(
            "Telemetry: %s (%s) playing %s/%s in %s -> %s%s",
            client.client_name or "<unnamed>",
            client.device_id,
            media.video_codec or "-",
            media.audio_codec or "-",
            media.container or "-",
            method.value,
            f" (reasons: {transcode_reasons})" if transcode_reasons else "",
        )
        return outcome

    def record_playback_stop(
        self,
        play_session_id: str,
        played_ticks: int | None,
        total_ticks: int | None,
    ) -> PlaybackOutcome | None:
        """Complete the session's outcome with progress and a result.

        A transcode session stays TRANSCODED unless it was abandoned before
        TRANSCODE_ABANDON_RATIO of the runtime, which is SUSPECTED_FAILURE.

        Returns:
            The updated outcome, or None if no start was recorded for the
            session.
        """
        if not play_session_id:
            return None

        outcome = self.store.get_outcome_by_session(play_session_id)
        if outcome is None:
            logger.debug("Telemetry: no start record for session %s", play_session_id)
            return None

        outcome.played_ticks = played_ticks
        outcome.total_ticks = total_ticks
        if outcome.result is PlaybackResult.TRANSCODED:
            ratio = compute_playback_ratio(outcome)
            if ratio is not None and ratio < TRANSCODE_ABANDON_RATIO:
                outcome.result = PlaybackResult.SUSPECTED_FAILURE
        else:
            outcome.result = PlaybackResult.UNKNOWN
        classify_outcome(outcome)
        self.store.record_outcome(outcome)

        logger.info(
            "Telemetry: session %s ended, result=%s, played=%s/%s",
            play_session_id,
            outcome.result.value,
            played_ticks,
            total_ticks,
        )
        return outcome

    def prune_old_data(self, now: datetime | None = None) -> int:
        """Delete outcomes older than the retention period.

        Returns:
            Number of outcomes deleted.
        """
        cutoff = (now or utc_now()) - timedelta(days=self.config.retention_days)
        return self.store.prune_outcomes(cutoff)
