"""Transcode cost estimation.

Additive scoring over the properties that make a conversion expensive for
the server (codec complexity, resolution, HDR, bit depth, subtitle burn-in,
lossless multichannel audio). A zero score means nothing needs decoding and
the item is graded on how cheaply it can be repackaged instead.
"""

from __future__ import annotations

from tunecast.core.codecs import (
    LEGACY_CONTAINERS,
    LOSSLESS_AUDIO_CODECS,
    UNIVERSAL_CONTAINERS,
    is_dolby_vision,
    is_hdr,
)
from tunecast.domain.enums import TranscodeCost
from tunecast.domain.models import MediaCharacteristics

# Decode/encode complexity per video codec; anything unlisted scores 1
VIDEO_CODEC_WEIGHTS: dict[str, int] = {
    "h264": 0,
    "mpeg2video": 0,
    "mpeg4": 0,
    "vp8": 0,
    "theora": 0,
    "hevc": 1,
    "vp9": 1,
    "vc1": 1,
    "wmv3": 1,
    "av1": 2,
}
UNKNOWN_VIDEO_CODEC_WEIGHT = 1

# Codecs that already remux cleanly out of Matroska
MKV_REMUXABLE_CODECS: frozenset[str] = frozenset({"h264", "hevc"})


def _video_codec_weight(codec: str) -> int:
    if not codec:
        return 0
    return VIDEO_CODEC_WEIGHTS.get(codec, UNKNOWN_VIDEO_CODEC_WEIGHT)


def _resolution_weight(width: int | None, height: int | None) -> int:
    w = width or 0
    h = height or 0
    if w >= 3840 or h >= 2160:
        return 3
    if w >= 2560 or h >= 1440:
        return 1
    return 0


def _range_weight(range_type: str) -> int:
    if is_dolby_vision(range_type):
        return 4
    if is_hdr(range_type):
        return 2
    return 0


def _bit_depth_weight(bit_depth: int | None) -> int:
    if bit_depth is None:
        return 0
    if bit_depth >= 12:
        return 2
    if bit_depth >= 10:
        return 1
    return 0


def _audio_weight(codec: str, channels: int | None) -> int:
    weight = 1 if codec in LOSSLESS_AUDIO_CODECS else 0
    if weight > 0 and channels is not None and channels > 6:
        weight += 1
    return weight


def cost_score(media: MediaCharacteristics) -> int:
    """Return the raw additive cost score for a media item."""
    score = _video_codec_weight(media.video_codec)
    score += _resolution_weight(media.width, media.height)
    score += _range_weight(media.video_range_type)
    score += _bit_depth_weight(media.video_bit_depth)
    if media.has_image_subtitles:
        score += 2  # burn-in forces a full video transcode
    score += _audio_weight(media.audio_codec, media.audio_channels)
    return score


def _remux_potential(media: MediaCharacteristics) -> TranscodeCost:
    if not media.video_codec or not media.container:
        return TranscodeCost.LOW
    if media.container in UNIVERSAL_CONTAINERS:
        return TranscodeCost.LOW
    if media.container == "mkv" and media.video_codec in MKV_REMUXABLE_CODECS:
        return TranscodeCost.REMUX
    if media.container in LEGACY_CONTAINERS:
        return TranscodeCost.REMUX
    return TranscodeCost.LOW


def estimate_transcode_cost(media: MediaCharacteristics) -> TranscodeCost:
    """Estimate the server cost of converting a media item.

    Pure and deterministic: the same characteristics always yield the same
    tier, and missing fields contribute nothing.

    Args:
        media: Media characteristics (codec names already canonical).

    Returns:
        The cost tier.
    """
    score = cost_score(media)
    if score <= 0:
        return _remux_potential(media)
    if score <= 1:
        return TranscodeCost.LOW
    if score <= 3:
        return TranscodeCost.MEDIUM
    if score <= 6:
        return TranscodeCost.HIGH
    return TranscodeCost.EXTREME


def annotate_media(media: MediaCharacteristics) -> MediaCharacteristics:
    """Set media.transcode_cost_estimate unless it is already set.

    Returns the same object for chaining.
    """
    if media.transcode_cost_estimate is None:
        media.transcode_cost_estimate = estimate_transcode_cost(media)
    return media
