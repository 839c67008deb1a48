"""Tests for TelemetryService."""

import json
from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from tunecast.config.models import PolicyConfig
from tunecast.core.datetime_utils import utc_now
from tunecast.db.store import SqliteDataStore
from tunecast.domain.enums import PlaybackResult, PlayMethod
from tunecast.domain.models import PlaybackOutcome, PlaybackPolicy
from tunecast.exceptions import StoreError
from tunecast.telemetry.service import TelemetryService


@pytest.fixture
def telemetry(store) -> TelemetryService:
    return TelemetryService(store, PolicyConfig(retention_days=30))


class TestRecordPlaybackStart:
    """Tests for record_playback_start()."""

    def test_records_session_with_policy_snapshot(
        self, telemetry, store, make_client, make_media
    ):
        """The start record carries the media, method and policy snapshot."""
        client = make_client(client_name="Roku")
        media = make_media(video_codec="hevc", audio_codec="eac3", container="mkv")
        policy = PlaybackPolicy(allow_direct_play=False, confidence=0.65, rationale="r")

        outcome = telemetry.record_playback_start(
            client, media, policy, "ps-1", "DirectStream"
        )

        assert outcome.id is not None
        stored = store.get_outcome_by_session("ps-1")
        assert stored.play_method == PlayMethod.DIRECT_STREAM
        assert stored.result == PlaybackResult.UNKNOWN
        assert stored.video_codec == "hevc"
        assert stored.item_id == "item-1"
        assert stored.client_name == "Roku"
        snapshot = json.loads(stored.policy_snapshot)
        assert snapshot["allow_direct_play"] is False
        assert snapshot["confidence"] == 0.65

    def test_transcode_start_marked_transcoded(
        self, telemetry, store, make_client, make_media
    ):
        """Sessions that start transcoding are TRANSCODED immediately."""
        telemetry.record_playback_start(
            make_client(),
            make_media(),
            PlaybackPolicy.default(),
            "ps-1",
            PlayMethod.TRANSCODE,
            transcode_reasons="AudioCodecNotSupported",
        )

        stored = store.get_outcome_by_session("ps-1")
        assert stored.result == PlaybackResult.TRANSCODED
        assert stored.transcode_reasons == "AudioCodecNotSupported"

    def test_store_errors_propagate(self, make_client, make_media):
        """The service does not swallow store failures."""
        failing = MagicMock(spec=SqliteDataStore)
        failing.record_outcome.side_effect = StoreError("disk full")

        with pytest.raises(StoreError):
            TelemetryService(failing, PolicyConfig()).record_playback_start(
                make_client(), make_media(), PlaybackPolicy.default(), "ps-1", "DirectPlay"
            )


class TestRecordPlaybackStop:
    """Tests for record_playback_stop()."""

    def _start(self, telemetry, make_client, make_media, method="DirectPlay"):
        telemetry.record_playback_start(
            make_client(), make_media(video_codec="h264"), PlaybackPolicy.default(), "ps-1", method
        )

    def test_completes_and_classifies(self, telemetry, store, make_client, make_media):
        """Stopping a long session classifies it as a success."""
        self._start(telemetry, make_client, make_media)

        outcome = telemetry.record_playback_stop("ps-1", 9_000, 10_000)

        assert outcome.result == PlaybackResult.SUCCESS
        stored = store.get_outcome_by_session("ps-1")
        assert stored.id == outcome.id
        assert stored.played_ticks == 9_000
        assert stored.result == PlaybackResult.SUCCESS
        assert len(store.get_outcomes_by_device("dev-1", 10)) == 1

    def test_short_session_suspected_failure(self, telemetry, make_client, make_media):
        """Stopping almost immediately is a suspected failure."""
        self._start(telemetry, make_client, make_media)

        outcome = telemetry.record_playback_stop("ps-1", 100, 100_000)

        assert outcome.result == PlaybackResult.SUSPECTED_FAILURE

    def test_transcoded_result_kept(self, telemetry, make_client, make_media):
        """A transcoded session stays TRANSCODED, even when stopped early."""
        self._start(telemetry, make_client, make_media, method="Transcode")

        outcome = telemetry.record_playback_stop("ps-1", 5_000, 100_000)

        assert outcome.result == PlaybackResult.TRANSCODED

    def test_abandoned_transcode_suspected_failure(
        self, telemetry, make_client, make_media
    ):
        """A transcode stopped before 2% of the runtime is a suspected failure."""
        self._start(telemetry, make_client, make_media, method="Transcode")

        outcome = telemetry.record_playback_stop("ps-1", 1_000, 100_000)

        assert outcome.result == PlaybackResult.SUSPECTED_FAILURE

    def test_transcode_without_ticks_kept(self, telemetry, make_client, make_media):
        """Without tick data a transcoded session keeps its result."""
        self._start(telemetry, make_client, make_media, method="Transcode")

        outcome = telemetry.record_playback_stop("ps-1", None, None)

        assert outcome.result == PlaybackResult.TRANSCODED

    def test_unknown_session(self, telemetry):
        """A stop without a start record returns None."""
        assert telemetry.record_playback_stop("missing", 1, 2) is None
        assert telemetry.record_playback_stop("", 1, 2) is None


class TestPruneOldData:
    """Tests for prune_old_data()."""

    def test_prunes_outside_retention(self, telemetry, store):
        """Outcomes older than the retention period are deleted."""
        now = utc_now()
        store.record_outcome(PlaybackOutcome(device_id="dev-1", timestamp=now - timedelta(days=31)))
        store.record_outcome(PlaybackOutcome(device_id="dev-1", timestamp=now - timedelta(days=29)))

        assert telemetry.prune_old_data(now) == 1
        assert len(store.get_outcomes_by_device("dev-1", 10)) == 1
