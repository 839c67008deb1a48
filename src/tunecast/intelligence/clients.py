"""Client identity resolution and baseline capability knowledge.

Client categories are inferred from the reported client and device names;
claims are never trusted beyond that. A newly seen client is seeded with
baseline confidence for its category, and learning refines it from there.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from tunecast.core.datetime_utils import utc_now
from tunecast.db.store import DataStore
from tunecast.domain.enums import ClientType
from tunecast.domain.models import ClientProfile
from tunecast.exceptions import StoreError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionDescriptor:
    """What the host reports about the client behind a playback session."""

    device_id: str
    client_name: str = ""
    client_version: str = ""
    device_name: str = ""
    user_agent: str = ""


def resolve_client_type(client_name: str | None, device_name: str | None) -> ClientType:
    """Infer the client category from its client and device names.

    Matching is case-insensitive substring search, checked in a fixed order
    so that e.g. "Swiftfin" on an Apple TV wins over generic matches.
    """
    client = (client_name or "").lower()
    device = (device_name or "").lower()

    if "roku" in client:
        return ClientType.ROKU

    if "swiftfin" in client:
        if "apple tv" in device or "appletv" in device:
            return ClientType.SWIFTFIN_TVOS
        return ClientType.SWIFTFIN_IOS

    if "android" in client:
        tv_like = (
            "androidtv" in client
            or "fire tv" in device
            or "firetv" in device
            or "aftm" in device
        )
        if not tv_like:
            return ClientType.ANDROID_MOBILE
        # Fire TV model ids start with "AFT"
        if "fire" in device or "aft" in device:
            return ClientType.FIRE_TV
        return ClientType.ANDROID_TV

    if "findroid" in client:
        return ClientType.ANDROID_TV

    if "jellyfin web" in client or "jellyfin-web" in client:
        return ClientType.WEB_BROWSER

    if any(
        name in client
        for name in ("jellyfin media player", "jellyfin desktop", "jellyfin mpv")
    ):
        return ClientType.DESKTOP

    if "xbox" in client:
        return ClientType.XBOX

    if "kodi" in client:
        return ClientType.KODI

    if "dlna" in client:
        return ClientType.DLNA

    return ClientType.UNKNOWN


# =============================================================================
# Baseline confidence
# =============================================================================
# Starting likelihood of direct play per canonical codec/container name, by
# category. Categories that share hardware share a table.

_ANDROID_TV_CODECS = {
    "h264": 0.95,
    "hevc": 0.6,  # SoC-dependent
    "vp9": 0.5,
    "av1": 0.3,  # Android 10+ with HW decoder
    "mpeg2video": 0.4,
    "vc1": 0.3,
    "aac": 0.95,
    "mp3": 0.95,
    "ac3": 0.7,
    "eac3": 0.5,
    "truehd": 0.3,  # Shield Pro passthrough
    "dts": 0.5,
    "dts-hd ma": 0.3,
    "dts-hd hra": 0.3,
    "flac": 0.6,
    "opus": 0.5,
    "vorbis": 0.5,
}

_SWIFTFIN_CODECS = {
    "h264": 0.95,
    "hevc": 0.85,
    "vp9": 0.4,  # VLCKit player only
    "av1": 0.3,
    "mpeg2video": 0.3,
    "vc1": 0.1,
    "aac": 0.95,
    "mp3": 0.95,
    "ac3": 0.8,
    "eac3": 0.8,
    "truehd": 0.4,  # Apple TV 4K via eARC
    "dts": 0.2,
    "dts-hd ma": 0.1,
    "flac": 0.7,
    "opus": 0.3,
    "vorbis": 0.3,
    "alac": 0.95,
}

_SOFTWARE_PLAYER_CODECS = {
    "h264": 0.95,
    "hevc": 0.9,
    "vp8": 0.9,
    "vp9": 0.9,
    "av1": 0.7,
    "mpeg2video": 0.9,
    "vc1": 0.8,
    "mpeg4": 0.9,
    "theora": 0.8,
    "aac": 0.95,
    "mp3": 0.95,
    "ac3": 0.9,
    "eac3": 0.9,
    "truehd": 0.7,
    "dts": 0.8,
    "dts-hd ma": 0.7,
    "dts-hd hra": 0.7,
    "flac": 0.95,
    "opus": 0.9,
    "vorbis": 0.9,
    "alac": 0.8,
    "pcm": 0.9,
}

BASELINE_CODEC_CONFIDENCE: dict[ClientType, dict[str, float]] = {
    ClientType.WEB_BROWSER: {
        "h264": 0.95,
        "hevc": 0.2,  # Most browsers can't decode HEVC
        "vp8": 0.85,
        "vp9": 0.7,
        "av1": 0.4,
        "mpeg2video": 0.1,
        "vc1": 0.05,
        "aac": 0.95,
        "mp3": 0.95,
        "opus": 0.8,
        "vorbis": 0.7,
        "flac": 0.6,
        "ac3": 0.3,
        "eac3": 0.1,
        "truehd": 0.0,
        "dts": 0.0,
        "dts-hd ma": 0.0,
        "dts-hd hra": 0.0,
    },
    ClientType.ROKU: {
        "h264": 0.95,
        "hevc": 0.6,  # Only in mp4/m4v/mov
        "vp9": 0.3,
        "av1": 0.1,
        "mpeg2video": 0.2,
        "vc1": 0.1,
        "aac": 0.95,
        "mp3": 0.9,
        "ac3": 0.7,
        "eac3": 0.5,
        "opus": 0.1,
        "flac": 0.3,
        "truehd": 0.0,
        "dts": 0.1,
        "dts-hd ma": 0.0,
        "vorbis": 0.2,
    },
    ClientType.ANDROID_TV: _ANDROID_TV_CODECS,
    ClientType.FIRE_TV: _ANDROID_TV_CODECS,
    ClientType.SWIFTFIN_IOS: _SWIFTFIN_CODECS,
    ClientType.SWIFTFIN_TVOS: _SWIFTFIN_CODECS,
    ClientType.DESKTOP: _SOFTWARE_PLAYER_CODECS,
    ClientType.KODI: _SOFTWARE_PLAYER_CODECS,
    ClientType.XBOX: {
        "h264": 0.95,
        "hevc": 0.5,
        "vp9": 0.3,
        "av1": 0.1,
        "vc1": 0.7,
        "mpeg2video": 0.3,
        "aac": 0.95,
        "mp3": 0.95,
        "ac3": 0.7,
        "eac3": 0.5,
        "truehd": 0.2,
        "dts": 0.4,
        "dts-hd ma": 0.2,
        "flac": 0.4,
    },
    ClientType.DLNA: {
        "h264": 0.7,
        "hevc": 0.2,
        "mpeg2video": 0.5,
        "vc1": 0.3,
        "aac": 0.7,
        "mp3": 0.8,
        "ac3": 0.5,
        "lpcm": 0.6,
        "flac": 0.2,
    },
    ClientType.ANDROID_MOBILE: {
        "h264": 0.95,
        "hevc": 0.5,
        "vp9": 0.5,
        "av1": 0.2,
        "aac": 0.95,
        "mp3": 0.95,
        "opus": 0.6,
        "ac3": 0.3,  # Rarely direct on phone speakers
        "flac": 0.5,
        "vorbis": 0.5,
    },
    ClientType.UNKNOWN: {
        "h264": 0.7,
        "hevc": 0.3,
        "vp9": 0.2,
        "av1": 0.1,
        "aac": 0.7,
        "mp3": 0.7,
        "ac3": 0.3,
    },
}

_ANDROID_TV_CONTAINERS = {
    "mp4": 0.95,
    "mkv": 0.8,
    "m4v": 0.9,
    "webm": 0.7,
    "ts": 0.7,
    "avi": 0.5,
    "mov": 0.8,
    "ogg": 0.5,
    "flv": 0.3,
    "wmv": 0.1,
    "mpegts": 0.7,
}

_SWIFTFIN_CONTAINERS = {
    "mp4": 0.95,
    "m4v": 0.95,
    "mov": 0.95,
    "mkv": 0.6,  # VLCKit handles it, the native player doesn't
    "ts": 0.7,
    "webm": 0.3,
    "avi": 0.3,
    "hls": 0.95,
    "wmv": 0.0,
}

_SOFTWARE_PLAYER_CONTAINERS = {
    "mp4": 0.95,
    "mkv": 0.95,
    "m4v": 0.95,
    "webm": 0.95,
    "ts": 0.9,
    "avi": 0.9,
    "mov": 0.95,
    "ogg": 0.9,
    "flv": 0.8,
    "wmv": 0.7,
    "mpegts": 0.9,
}

BASELINE_CONTAINER_CONFIDENCE: dict[ClientType, dict[str, float]] = {
    ClientType.WEB_BROWSER: {
        "mp4": 0.95,
        "m4v": 0.9,
        "webm": 0.85,
        "mkv": 0.2,
        "avi": 0.05,
        "ts": 0.4,
        "mov": 0.7,
        "ogg": 0.6,
        "flv": 0.05,
        "wmv": 0.0,
        "mpegts": 0.4,
    },
    ClientType.ROKU: {
        "mp4": 0.95,
        "m4v": 0.9,
        "mov": 0.8,
        "mkv": 0.1,
        "ts": 0.5,
        "hls": 0.9,
        "avi": 0.1,
        "webm": 0.1,
        "wmv": 0.0,
    },
    ClientType.ANDROID_TV: _ANDROID_TV_CONTAINERS,
    ClientType.FIRE_TV: _ANDROID_TV_CONTAINERS,
    ClientType.SWIFTFIN_IOS: _SWIFTFIN_CONTAINERS,
    ClientType.SWIFTFIN_TVOS: _SWIFTFIN_CONTAINERS,
    ClientType.DESKTOP: _SOFTWARE_PLAYER_CONTAINERS,
    ClientType.KODI: _SOFTWARE_PLAYER_CONTAINERS,
    ClientType.XBOX: {
        "mp4": 0.95,
        "m4v": 0.8,
        "mkv": 0.5,
        "avi": 0.4,
        "ts": 0.5,
        "mov": 0.6,
        "wmv": 0.7,
        "webm": 0.2,
    },
    ClientType.DLNA: {
        "mp4": 0.7,
        "ts": 0.6,
        "mpegts": 0.6,
        "avi": 0.4,
        "mkv": 0.1,  # Most renderers choke on MKV
        "wmv": 0.3,
        "mov": 0.3,
    },
    ClientType.ANDROID_MOBILE: {
        "mp4": 0.95,
        "mkv": 0.7,
        "m4v": 0.9,
        "webm": 0.6,
        "ts": 0.5,
        "avi": 0.4,
        "mov": 0.7,
        "ogg": 0.5,
    },
    ClientType.UNKNOWN: {
        "mp4": 0.7,
        "mkv": 0.3,
        "ts": 0.4,
        "avi": 0.2,
        "mov": 0.4,
    },
}


def apply_baseline_confidence(client: ClientProfile) -> int:
    """Seed the client's confidence maps from its category baseline.

    Only keys the client has no value for are filled, so learned values are
    preserved.

    Returns:
        Number of entries added.
    """
    added = 0
    baselines = (
        (client.codec_confidence, BASELINE_CODEC_CONFIDENCE),
        (client.container_confidence, BASELINE_CONTAINER_CONFIDENCE),
    )
    for confidence, table in baselines:
        defaults = table.get(client.client_type) or table[ClientType.UNKNOWN]
        for key, value in defaults.items():
            if key not in confidence:
                confidence[key] = value
                added += 1
    return added


class ClientRegistry:
    """Resolves sessions to client profiles, with a write-through cache.

    Once a device is cached its profile is returned as is; call
    invalidate() to force the next resolve to reload it from the store.
    """

    def __init__(self, store: DataStore) -> None:
        self.store = store
        self._cache: dict[str, ClientProfile] = {}
        self._lock = threading.Lock()

    def resolve(self, session: SessionDescriptor) -> ClientProfile:
        """Return the profile for the session's device, creating it if new.

        The stored profile (or a fresh one) is refreshed with the session's
        names, its category re-inferred, and missing baseline confidence
        filled in before it is cached and persisted. A store failure is
        logged; the in-memory profile is still returned.
        """
        device_id = session.device_id
        with self._lock:
            cached = self._cache.get(device_id)
            if cached is not None:
                return cached

            try:
                stored = self.store.get_client(device_id)
            except StoreError as e:
                logger.warning("Failed to load client %s: %s", device_id, e)
                stored = None

            client = stored or ClientProfile(device_id=device_id)
            client.client_name = session.client_name
            client.client_version = session.client_version
            client.device_name = session.device_name
            if session.user_agent:
                client.user_agent = session.user_agent
            client.client_type = resolve_client_type(
                session.client_name, session.device_name
            )
            client.last_updated = utc_now()
            apply_baseline_confidence(client)

            self._cache[device_id] = client

        try:
            self.store.upsert_client(client)
        except StoreError as e:
            logger.error("Failed to persist client %s: %s", device_id, e)

        logger.debug(
            "Resolved client %s as %s (%s v%s)",
            device_id,
            client.client_type.value,
            client.client_name,
            client.client_version,
        )
        return client

    def get(self, device_id: str) -> ClientProfile | None:
        """Return the cached profile, without touching the store."""
        with self._lock:
            return self._cache.get(device_id)

    def invalidate(self, device_id: str) -> None:
        """Drop one device from the cache."""
        with self._lock:
            self._cache.pop(device_id, None)
