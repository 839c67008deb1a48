"""Confidence learning from observed playback outcomes.

LearningService nudges a client's codec and container confidence after each
session (an exponential moving average with a fixed learning rate) and can
rebuild those values from the stored outcome history. All read-adjust-clamp-
persist sequences for one device run under that device's lock.
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict

from tunecast.config.models import PolicyConfig
from tunecast.core.datetime_utils import utc_now
from tunecast.db.store import DataStore
from tunecast.domain.models import ClientProfile, PlaybackOutcome
from tunecast.exceptions import StoreError
from tunecast.learning.classify import (
    Adjustments,
    classify_outcome,
    compute_adjustments,
    is_direct_play_success,
)
from tunecast.metrics import (
    LEARNING_LOST_UPDATES,
    LEARNING_RECALIBRATIONS,
    LEARNING_UPDATES,
    increment_counter,
)

logger = logging.getLogger(__name__)

LEARNING_RATE = 0.15
MIN_CONFIDENCE = 0.0
MAX_CONFIDENCE = 1.0

# Recalibration skips keys with fewer observations than this
MIN_RECALIBRATION_SAMPLES = 3
# Blend weights for recalibration: existing value vs observed success rate
EXISTING_WEIGHT = 0.3
OBSERVED_WEIGHT = 0.7


def _clamp(value: float) -> float:
    return max(MIN_CONFIDENCE, min(MAX_CONFIDENCE, value))


def apply_adjustment(confidence: dict[str, float], key: str, magnitude: float) -> bool:
    """Move one confidence entry by magnitude x LEARNING_RATE.

    A missing entry starts at 0.0. An empty key or zero magnitude is a
    no-op.

    Returns:
        True if the map was changed.
    """
    if not key or magnitude == 0.0:
        return False
    current = confidence.get(key, 0.0)
    confidence[key] = _clamp(current + magnitude * LEARNING_RATE)
    return True


class _Tally:
    __slots__ = ("successes", "total")

    def __init__(self) -> None:
        self.successes = 0
        self.total = 0

    def add(self, success: bool) -> None:
        self.total += 1
        if success:
            self.successes += 1

    @property
    def rate(self) -> float:
        return self.successes / self.total


def _accumulate(stats: dict[str, _Tally], key: str, success: bool) -> None:
    if key:
        stats[key].add(success)


def _apply_recalibrated(confidence: dict[str, float], stats: dict[str, _Tally]) -> int:
    updated = 0
    for key, tally in stats.items():
        if tally.total < MIN_RECALIBRATION_SAMPLES:
            continue
        existing = confidence.get(key, 0.0)
        confidence[key] = _clamp(
            existing * EXISTING_WEIGHT + tally.rate * OBSERVED_WEIGHT
        )
        updated += 1
    return updated


class LearningService:
    """Adjusts client confidence from playback outcomes.

    Never decides policy; it only writes the confidence maps the decision
    engine reads.
    """

    def __init__(self, store: DataStore, config: PolicyConfig) -> None:
        self.store = store
        self.config = config
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def _lock_for(self, device_id: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(device_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[device_id] = lock
            return lock

    def process_outcome(
        self, outcome: PlaybackOutcome, client: ClientProfile
    ) -> Adjustments | None:
        """Apply one outcome's evidence to the client's confidence.

        Does nothing when learning is disabled. The client is modified in
        place and persisted; a store failure is logged and the update is
        counted as lost (the in-memory values keep the adjustment).

        Returns:
            The adjustments applied (before the learning rate), or None when
            learning is disabled.
        """
        if not self.config.enable_learning:
            return None

        with self._lock_for(client.device_id):
            classify_outcome(outcome)
            adjustments = compute_adjustments(outcome)

            apply_adjustment(client.codec_confidence, outcome.video_codec, adjustments.video)
            apply_adjustment(client.codec_confidence, outcome.audio_codec, adjustments.audio)
            apply_adjustment(
                client.container_confidence, outcome.container, adjustments.container
            )
            client.last_updated = utc_now()

            try:
                self.store.upsert_client(client)
            except StoreError as e:
                logger.error(
                    "Failed to persist learning update for %s: %s", client.device_id, e
                )
                increment_counter(LEARNING_LOST_UPDATES)
                return adjustments

        increment_counter(LEARNING_UPDATES)
        logger.debug(
            "Learning update for %s: video=%s(%+.3f) audio=%s(%+.3f) "
            "container=%s(%+.3f) result=%s method=%s",
            client.device_id,
            outcome.video_codec,
            adjustments.video,
            outcome.audio_codec,
            adjustments.audio,
            outcome.container,
            adjustments.container,
            outcome.result.value,
            outcome.play_method.value,
        )
        return adjustments

    def recalibrate_client(self, client: ClientProfile) -> int:
        """Rebuild confidence from the device's recent outcome history.

        Considers the most recent `recalibration_window` outcomes. For each
        codec and container seen at least MIN_RECALIBRATION_SAMPLES times,
        the direct-play success rate is blended with the existing value.

        Never raises; store failures are logged.

        Returns:
            Number of confidence entries updated.
        """
        with self._lock_for(client.device_id):
            try:
                outcomes = self.store.get_outcomes_by_device(
                    client.device_id, self.config.recalibration_window
                )
            except StoreError as e:
                logger.error(
                    "Failed to load outcomes for %s, skipping recalibration: %s",
                    client.device_id,
                    e,
                )
                return 0

            if not outcomes:
                logger.debug("No outcomes for %s, nothing to recalibrate", client.device_id)
                return 0

            video_stats: dict[str, _Tally] = defaultdict(_Tally)
            audio_stats: dict[str, _Tally] = defaultdict(_Tally)
            container_stats: dict[str, _Tally] = defaultdict(_Tally)

            for outcome in outcomes:
                classify_outcome(outcome)
                success = is_direct_play_success(outcome)
                _accumulate(video_stats, outcome.video_codec, success)
                _accumulate(audio_stats, outcome.audio_codec, success)
                _accumulate(container_stats, outcome.container, success)

            updated = _apply_recalibrated(client.codec_confidence, video_stats)
            updated += _apply_recalibrated(client.codec_confidence, audio_stats)
            updated += _apply_recalibrated(client.container_confidence, container_stats)
            client.last_updated = utc_now()

            try:
                self.store.upsert_client(client)
            except StoreError as e:
                logger.error(
                    "Failed to persist recalibration for %s: %s", client.device_id, e
                )
                increment_counter(LEARNING_LOST_UPDATES)
                return updated

        increment_counter(LEARNING_RECALIBRATIONS)
        logger.info(
            "Recalibrated %s from %d outcomes: %d video codecs, %d audio codecs, "
            "%d containers seen, %d entries updated",
            client.device_id,
            len(outcomes),
            len(video_stats),
            len(audio_stats),
            len(container_stats),
            updated,
        )
        return updated

    def recalibrate_all(self) -> dict[str, int]:
        """Recalibrate every stored client.

        Returns:
            Mapping of device id to entries updated.
        """
        try:
            clients = self.store.get_all_clients()
        except StoreError as e:
            logger.error("Failed to list clients for recalibration: %s", e)
            return {}
        return {client.device_id: self.recalibrate_client(client) for client in clients}
