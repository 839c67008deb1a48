"""Playback event handling.

PlaybackAdvisor is the entry point a host integration calls on session
lifecycle events:

    playback start -> resolve client and media -> compute policy
                   -> record intervention and telemetry
    playback stop  -> complete telemetry -> learn from the outcome
    session end    -> drop the client from the cache

Every handler logs and absorbs persistence failures; playback is never
blocked by TuneCast.
"""

from __future__ import annotations

import logging

from tunecast.config.models import PolicyConfig
from tunecast.db.store import DataStore
from tunecast.decision.engine import DecisionEngine
from tunecast.domain.enums import PlayMethod
from tunecast.domain.models import (
    InterventionRecord,
    MediaCharacteristics,
    PlaybackOutcome,
    PlaybackPolicy,
)
from tunecast.exceptions import StoreError
from tunecast.intelligence.clients import ClientRegistry, SessionDescriptor
from tunecast.intelligence.media import MediaRegistry
from tunecast.learning.service import LearningService
from tunecast.logging.context import playback_context
from tunecast.telemetry.service import TelemetryService

logger = logging.getLogger(__name__)


class PlaybackAdvisor:
    """Wires the registries, engine, telemetry and learning together."""

    def __init__(
        self,
        store: DataStore,
        config: PolicyConfig,
        *,
        engine: DecisionEngine | None = None,
        clients: ClientRegistry | None = None,
        media: MediaRegistry | None = None,
        telemetry: TelemetryService | None = None,
        learning: LearningService | None = None,
    ) -> None:
        self.store = store
        self.config = config
        self.engine = engine or DecisionEngine(config)
        self.clients = clients or ClientRegistry(store)
        self.media = media or MediaRegistry()
        self.telemetry = telemetry or TelemetryService(store, config)
        self.learning = learning or LearningService(store, config)

    def on_playback_start(
        self,
        session: SessionDescriptor,
        media: MediaCharacteristics,
        play_session_id: str,
        play_method: PlayMethod | str = PlayMethod.UNKNOWN,
        transcode_reasons: str = "",
    ) -> PlaybackPolicy:
        """Compute and record the policy for a starting session.

        With dynamic profiles disabled the policy is still computed and
        recorded, but marked as a dry run. An active pass-through policy
        imposes nothing and is not recorded as an intervention.

        Returns:
            The computed policy, or the default policy if handling failed.
        """
        with playback_context(session.device_id, media.media_source_id):
            try:
                client = self.clients.resolve(session)
                resolved = self.media.resolve(media)
                policy = self.engine.compute(client, resolved)
            except Exception:
                logger.exception("Error handling playback start")
                return PlaybackPolicy.default()

            is_active = self.config.enable_dynamic_profiles
            if not is_active:
                logger.info(
                    "[DRY RUN] Would apply: direct_play=%s direct_stream=%s "
                    "transcode=%s cap=%s confidence=%.2f",
                    policy.allow_direct_play,
                    policy.allow_direct_stream,
                    policy.allow_transcoding,
                    policy.bitrate_cap,
                    policy.confidence,
                )

            try:
                if not (is_active and policy.is_default):
                    self.store.record_intervention(
                        InterventionRecord.from_policy(
                            policy,
                            client=client,
                            media_source_id=resolved.media_source_id,
                            is_active=is_active,
                        )
                    )
                self.telemetry.record_playback_start(
                    client,
                    resolved,
                    policy,
                    play_session_id,
                    play_method,
                    transcode_reasons,
                )
            except StoreError as e:
                logger.error("Failed to record playback start: %s", e)

            return policy

    def on_playback_stop(
        self,
        session: SessionDescriptor,
        play_session_id: str,
        played_ticks: int | None,
        total_ticks: int | None,
    ) -> PlaybackOutcome | None:
        """Complete the session's telemetry and learn from it.

        Returns:
            The completed outcome, or None if there was no start record or
            handling failed.
        """
        if not play_session_id:
            return None

        with playback_context(session.device_id):
            try:
                outcome = self.telemetry.record_playback_stop(
                    play_session_id, played_ticks, total_ticks
                )
            except StoreError as e:
                logger.error("Failed to record playback stop for %s: %s", play_session_id, e)
                return None

            if outcome is None:
                return None

            client = self.clients.get(session.device_id) or self.clients.resolve(session)
            self.learning.process_outcome(outcome, client)
            return outcome

    def on_session_end(self, device_id: str) -> None:
        """Forget the cached client so the next session reloads it."""
        if device_id:
            logger.debug("Session ended for %s, clearing cache", device_id)
            self.clients.invalidate(device_id)
