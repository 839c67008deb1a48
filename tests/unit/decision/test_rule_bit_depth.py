"""Tests for the bit depth rule."""

import pytest

from tunecast.decision.rules import bit_depth
from tunecast.domain.enums import ClientType, RuleSeverity


class TestBitDepthRule:
    """Tests for bit_depth.evaluate()."""

    def test_h264_hi10p_required_for_everyone(self, make_client, make_media):
        """10-bit H.264 is a REQUIRE transcode even on desktop clients."""
        finding = bit_depth.evaluate(
            make_client(client_type=ClientType.DESKTOP),
            make_media(video_codec="avc", video_bit_depth=10),
        )

        assert finding.rule_name == "bit_depth.h264_hi10p"
        assert finding.severity == RuleSeverity.REQUIRE
        assert finding.allow_direct_play is False
        assert finding.allow_transcoding is True

    def test_12bit_recommends_transcode(self, make_client, make_media):
        """12-bit video of other codecs is a RECOMMEND finding."""
        finding = bit_depth.evaluate(
            make_client(client_type=ClientType.ANDROID_TV),
            make_media(video_codec="hevc", video_bit_depth=12),
        )

        assert finding.rule_name == "bit_depth.12bit"
        assert finding.severity == RuleSeverity.RECOMMEND

    @pytest.mark.parametrize("client_type", [ClientType.DESKTOP, ClientType.KODI])
    def test_software_decoders_exempt_from_12bit(self, make_client, make_media, client_type):
        """Software-decoding clients handle 12-bit video."""
        finding = bit_depth.evaluate(
            make_client(client_type=client_type),
            make_media(video_codec="hevc", video_bit_depth=12),
        )

        assert finding is None

    @pytest.mark.parametrize("depth", [None, 8])
    def test_ordinary_bit_depth_no_opinion(self, make_client, make_media, depth):
        """8-bit or unknown depth never fires."""
        finding = bit_depth.evaluate(
            make_client(), make_media(video_codec="h264", video_bit_depth=depth)
        )

        assert finding is None

    def test_10bit_hevc_no_opinion(self, make_client, make_media):
        """10-bit HEVC is mainstream."""
        finding = bit_depth.evaluate(
            make_client(client_type=ClientType.ROKU),
            make_media(video_codec="hevc", video_bit_depth=10),
        )

        assert finding is None
