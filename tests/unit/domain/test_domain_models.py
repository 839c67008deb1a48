"""Tests for domain dataclasses."""

import json

from tunecast.domain.enums import ClientType, PlaybackResult, PlayMethod
from tunecast.domain.models import (
    DEFAULT_POLICY_RATIONALE,
    ClientProfile,
    InterventionRecord,
    MediaCharacteristics,
    PlaybackOutcome,
    PlaybackPolicy,
    canonical_codec_key,
)


class TestCanonicalCodecKey:
    """Tests for canonical_codec_key()."""

    def test_video_first(self):
        """Video aliases resolve."""
        assert canonical_codec_key("H265") == "hevc"

    def test_audio_fallback(self):
        """Audio aliases resolve when no video group matches."""
        assert canonical_codec_key("DCA") == "dts"

    def test_unknown(self):
        """Unknown codecs are normalized only."""
        assert canonical_codec_key(" ProRes ") == "prores"


class TestClientProfile:
    """Tests for ClientProfile lookups."""

    def test_missing_key_is_none(self):
        """No data is distinct from zero confidence."""
        client = ClientProfile(device_id="dev-1", codec_confidence={"hevc": 0.0})

        assert client.confidence_for_codec("hevc") == 0.0
        assert client.confidence_for_codec("av1") is None

    def test_lookup_canonicalizes(self):
        """Aliases find the canonical entry."""
        client = ClientProfile(
            device_id="dev-1",
            codec_confidence={"h264": 0.9},
            container_confidence={"mkv": 0.3},
        )

        assert client.confidence_for_codec("AVC") == 0.9
        assert client.confidence_for_container("Matroska") == 0.3

    def test_empty_name(self):
        """Empty names have no confidence."""
        client = ClientProfile(device_id="dev-1", codec_confidence={"": 1.0})

        assert client.confidence_for_codec("") is None
        assert client.confidence_for_container(None) is None

    def test_defaults(self):
        """New profiles start neutral."""
        client = ClientProfile(device_id="dev-1")

        assert client.client_type is ClientType.UNKNOWN
        assert client.reliability_score == 0.5
        assert client.max_bitrate is None


class TestMediaCharacteristics:
    """Tests for MediaCharacteristics canonicalization."""

    def test_names_canonicalized(self):
        """Codec and container names are canonical after construction."""
        media = MediaCharacteristics(
            video_codec="x265", audio_codec="DCA", container="matroska"
        )

        assert media.video_codec == "hevc"
        assert media.audio_codec == "dts"
        assert media.container == "mkv"

    def test_none_strings_become_empty(self):
        """None profile and range fields are stored as empty strings."""
        media = MediaCharacteristics(video_profile=None, video_range_type=None)

        assert media.video_profile == ""
        assert media.video_range_type == ""
        assert media.transcode_cost_estimate is None


class TestPlaybackPolicy:
    """Tests for PlaybackPolicy."""

    def test_default(self):
        """The default policy allows everything with zero confidence."""
        policy = PlaybackPolicy.default()

        assert policy.is_default
        assert policy.confidence == 0.0
        assert policy.bitrate_cap is None
        assert policy.rationale == DEFAULT_POLICY_RATIONALE

    def test_not_default_when_restricting(self):
        """Any restriction, cap or confidence makes a policy non-default."""
        assert not PlaybackPolicy(allow_direct_play=False, confidence=0.0).is_default
        assert not PlaybackPolicy(bitrate_cap=8_000_000, confidence=0.0).is_default
        assert not PlaybackPolicy(confidence=0.55).is_default

    def test_to_json(self):
        """Snapshots are compact sorted JSON with rounded confidence."""
        policy = PlaybackPolicy(
            allow_direct_play=False, confidence=0.123456, rationale="hevc"
        )

        data = json.loads(policy.to_json())

        assert data["allow_direct_play"] is False
        assert data["confidence"] == 0.1235
        assert list(data) == sorted(data)


class TestPlaybackOutcome:
    """Tests for PlaybackOutcome."""

    def test_normalization(self):
        """Codecs are canonicalized and the play method parsed."""
        outcome = PlaybackOutcome(
            device_id="dev-1",
            video_codec="H.265",
            container="Matroska",
            play_method="DirectPlay",
            transcode_reasons=None,
        )

        assert outcome.video_codec == "hevc"
        assert outcome.container == "mkv"
        assert outcome.play_method is PlayMethod.DIRECT_PLAY
        assert outcome.transcode_reasons == ""

    def test_to_dict(self):
        """Enums are rendered as their values."""
        outcome = PlaybackOutcome(
            device_id="dev-1",
            play_method=PlayMethod.TRANSCODE,
            result=PlaybackResult.TRANSCODED,
        )

        data = outcome.to_dict()

        assert data["play_method"] == "transcode"
        assert data["result"] == "transcoded"
        assert data["id"] is None


class TestInterventionRecord:
    """Tests for InterventionRecord.from_policy()."""

    def test_from_policy(self):
        """Policy decisions and client identity are copied."""
        client = ClientProfile(
            device_id="dev-1", device_name="Living Room", client_name="Jellyfin Web"
        )
        policy = PlaybackPolicy(
            allow_direct_play=False, bitrate_cap=8_000_000, confidence=0.55
        )

        record = InterventionRecord.from_policy(
            policy, client=client, media_source_id="ms-1", is_active=False
        )

        assert record.device_id == "dev-1"
        assert record.device_name == "Living Room"
        assert record.media_source_id == "ms-1"
        assert record.is_active is False
        assert record.allow_direct_play is False
        assert record.bitrate_cap == 8_000_000
        assert record.to_dict()["confidence"] == 0.55
