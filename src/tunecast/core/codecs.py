"""Centralized codec and container registry.

This module is the single source of truth for codec knowledge in TuneCast:
- Alias groups used to canonicalize codec/container names
- Codec families shared by the compatibility rules and the cost estimator

Canonical names are the keys used in client confidence maps, so every
codec or container string entering the system should pass through
get_canonical_codec() / get_canonical_container() first.
"""

from __future__ import annotations

# =============================================================================
# Alias Groups
# =============================================================================
# Keys are canonical names; values are every spelling that maps onto them.

VIDEO_CODEC_ALIASES: dict[str, frozenset[str]] = {
    "h264": frozenset({"h264", "h.264", "avc", "avc1", "x264"}),
    "hevc": frozenset({"hevc", "h265", "h.265", "x265", "hvc1", "hev1"}),
    "vp8": frozenset({"vp8", "vp08"}),
    "vp9": frozenset({"vp9", "vp09"}),
    "av1": frozenset({"av1", "av01", "libaom-av1"}),
    "mpeg2video": frozenset({"mpeg2video", "mpeg2", "mpeg-2"}),
    "mpeg4": frozenset({"mpeg4", "mp4v", "divx", "xvid"}),
    "vc1": frozenset({"vc1", "vc-1", "wvc1"}),
}

AUDIO_CODEC_ALIASES: dict[str, frozenset[str]] = {
    "truehd": frozenset({"truehd", "dolby truehd", "mlp"}),
    "dts-hd ma": frozenset({"dts-hd ma", "dts-hd.ma", "dtshd_ma", "dts-hd_ma"}),
    "dts-hd hra": frozenset({"dts-hd hra", "dts-hd.hra", "dtshd_hra", "dts-hd_hra"}),
    "dts": frozenset({"dts", "dca"}),
    "aac": frozenset({"aac", "aac_latm", "mp4a"}),
    "ac3": frozenset({"ac3", "ac-3", "a52"}),
    "eac3": frozenset({"eac3", "e-ac-3", "ec3", "ec-3"}),
    "mp3": frozenset({"mp3", "mp3float"}),
    "pcm": frozenset({"pcm", "pcm_s16le", "pcm_s24le", "pcm_s32le", "pcm_f32le"}),
    "flac": frozenset({"flac"}),
    "opus": frozenset({"opus"}),
    "vorbis": frozenset({"vorbis"}),
    "alac": frozenset({"alac"}),
}

CONTAINER_ALIASES: dict[str, frozenset[str]] = {
    "mkv": frozenset({"mkv", "matroska"}),
    "mp4": frozenset({"mp4", "mov,mp4,m4a,3gp,3g2,mj2"}),
    "ts": frozenset({"ts", "m2ts"}),
    "avi": frozenset({"avi"}),
    "wmv": frozenset({"wmv", "asf"}),
}


# =============================================================================
# Codec Families
# =============================================================================

# Lossless / high-bitrate audio that few clients decode natively
LOSSLESS_AUDIO_CODECS: frozenset[str] = frozenset({"truehd", "dts-hd ma", "dts-hd hra"})

# Every DTS variant, lossy or lossless
DTS_FAMILY_CODECS: frozenset[str] = frozenset({"dts", "dts-hd ma", "dts-hd hra"})

# Containers every mainstream client plays directly
UNIVERSAL_CONTAINERS: frozenset[str] = frozenset({"mp4", "m4v", "mov"})

# Legacy containers that are cheap to repackage but rarely direct-playable
LEGACY_CONTAINERS: frozenset[str] = frozenset({"avi", "wmv", "flv"})


# =============================================================================
# Normalization Functions
# =============================================================================


def normalize_codec(codec: str | None) -> str:
    """Normalize a codec or container name for comparison.

    Args:
        codec: Raw name as reported by the host.

    Returns:
        Lowercase, stripped name. Empty string for None.
    """
    if codec is None:
        return ""
    return codec.casefold().strip()


def _canonicalize(name: str | None, aliases: dict[str, frozenset[str]]) -> str:
    normalized = normalize_codec(name)
    if not normalized:
        return normalized

    for canonical, variants in aliases.items():
        if normalized == canonical or normalized in variants:
            return canonical

    return normalized


def get_canonical_codec(codec: str | None, track_type: str) -> str:
    """Get the canonical name for a codec.

    Args:
        codec: Codec name to canonicalize.
        track_type: One of 'video' or 'audio'.

    Returns:
        Canonical codec name (the alias group key), or the normalized input
        if it belongs to no group.
    """
    if track_type == "video":
        return _canonicalize(codec, VIDEO_CODEC_ALIASES)
    if track_type == "audio":
        return _canonicalize(codec, AUDIO_CODEC_ALIASES)
    return normalize_codec(codec)


def get_canonical_container(container: str | None) -> str:
    """Get the canonical name for a container format."""
    return _canonicalize(container, CONTAINER_ALIASES)


def is_dolby_vision(range_type: str | None) -> bool:
    """Check whether a dynamic range type denotes any Dolby Vision variant.

    Hosts report Dolby Vision as "DOVI", "DOVIWithHDR10", "DolbyVision",
    "Dolby Vision" and so on.
    """
    normalized = normalize_codec(range_type)
    return "dovi" in normalized or "dolbyvision" in normalized.replace(" ", "")


def is_hdr(range_type: str | None) -> bool:
    """Check whether a dynamic range type is anything other than SDR.

    An empty/unknown range type counts as SDR.
    """
    normalized = normalize_codec(range_type)
    return bool(normalized) and normalized != "sdr"
