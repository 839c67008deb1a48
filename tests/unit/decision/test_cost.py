"""Tests for transcode cost estimation."""

import copy

import pytest

from tunecast.decision.cost import annotate_media, cost_score, estimate_transcode_cost
from tunecast.domain.enums import TranscodeCost


class TestCostScore:
    """Tests for cost_score()."""

    def test_empty_media_scores_zero(self, make_media):
        """Missing fields contribute nothing."""
        assert cost_score(make_media()) == 0

    def test_components_add_up(self, make_media):
        """Codec, resolution, range, depth, subtitles and audio are additive."""
        media = make_media(
            video_codec="av1",  # 2
            width=3840,  # 3
            video_range_type="DOVI",  # 4
            video_bit_depth=12,  # 2
            has_image_subtitles=True,  # 2
            audio_codec="truehd",  # 1
            audio_channels=8,  # +1
        )

        assert cost_score(media) == 15

    def test_unknown_video_codec_weight(self, make_media):
        """Unlisted video codecs weigh as much as HEVC."""
        assert cost_score(make_media(video_codec="prores")) == 1

    def test_1440p_weight(self, make_media):
        """1440p adds a single point."""
        assert cost_score(make_media(video_codec="h264", width=2560, height=1440)) == 1

    def test_text_subtitles_free(self, make_media):
        """Text subtitles do not need burn-in."""
        assert cost_score(make_media(video_codec="h264", has_text_subtitles=True)) == 0

    def test_lossy_multichannel_audio_free(self, make_media):
        """Channel count only matters for lossless audio."""
        assert cost_score(make_media(audio_codec="eac3", audio_channels=8)) == 0


class TestEstimateTranscodeCost:
    """Tests for estimate_transcode_cost()."""

    @pytest.mark.parametrize(
        "fields,expected",
        [
            ({"video_codec": "h264", "container": "mkv"}, TranscodeCost.REMUX),
            ({"video_codec": "mpeg4", "container": "avi"}, TranscodeCost.REMUX),
            ({"video_codec": "h264", "container": "mp4"}, TranscodeCost.LOW),
            ({"video_codec": "vp8", "container": "webm"}, TranscodeCost.LOW),
            ({}, TranscodeCost.LOW),
            ({"video_codec": "hevc", "container": "mkv"}, TranscodeCost.LOW),
            ({"video_codec": "hevc", "width": 2560, "video_bit_depth": 10}, TranscodeCost.MEDIUM),
            ({"video_codec": "hevc", "width": 3840, "video_range_type": "HDR10"}, TranscodeCost.HIGH),
            ({"video_codec": "h264", "has_image_subtitles": True, "height": 2160}, TranscodeCost.HIGH),
        ],
    )
    def test_tiers(self, make_media, fields, expected):
        """Scores map onto the expected tiers."""
        assert estimate_transcode_cost(make_media(**fields)) == expected

    def test_4k_dolby_vision_is_extreme(self, make_media):
        """4K Dolby Vision HEVC is the most expensive tier."""
        media = make_media(
            video_codec="hevc", height=2160, video_range_type="DOVIWithHDR10"
        )

        assert estimate_transcode_cost(media) == TranscodeCost.EXTREME

    def test_pure_and_deterministic(self, make_media):
        """Estimation neither mutates its input nor varies between calls."""
        media = make_media(video_codec="hevc", container="mkv", width=3840)
        before = copy.deepcopy(media)

        first = estimate_transcode_cost(media)
        second = estimate_transcode_cost(media)

        assert first == second
        assert media == before


class TestAnnotateMedia:
    """Tests for annotate_media()."""

    def test_sets_missing_estimate(self, make_media):
        """An unannotated item gets its estimate."""
        media = make_media(video_codec="h264", container="mkv")

        result = annotate_media(media)

        assert result is media
        assert media.transcode_cost_estimate == TranscodeCost.REMUX

    def test_keeps_existing_estimate(self, make_media):
        """An existing estimate is left alone."""
        media = make_media(video_codec="h264", transcode_cost_estimate=TranscodeCost.EXTREME)

        annotate_media(media)

        assert media.transcode_cost_estimate == TranscodeCost.EXTREME
