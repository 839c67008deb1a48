"""Core utilities package.

Pure helpers with no external dependencies: codec/container
canonicalization and UTC datetime handling.
"""

from tunecast.core.codecs import (
    AUDIO_CODEC_ALIASES,
    CONTAINER_ALIASES,
    DTS_FAMILY_CODECS,
    LEGACY_CONTAINERS,
    LOSSLESS_AUDIO_CODECS,
    UNIVERSAL_CONTAINERS,
    VIDEO_CODEC_ALIASES,
    get_canonical_codec,
    get_canonical_container,
    is_dolby_vision,
    is_hdr,
    normalize_codec,
)
from tunecast.core.datetime_utils import parse_iso_timestamp, to_iso, utc_now

__all__ = [
    "AUDIO_CODEC_ALIASES",
    "CONTAINER_ALIASES",
    "DTS_FAMILY_CODECS",
    "LEGACY_CONTAINERS",
    "LOSSLESS_AUDIO_CODECS",
    "UNIVERSAL_CONTAINERS",
    "VIDEO_CODEC_ALIASES",
    "get_canonical_codec",
    "get_canonical_container",
    "is_dolby_vision",
    "is_hdr",
    "normalize_codec",
    "parse_iso_timestamp",
    "to_iso",
    "utc_now",
]
