"""Domain models for TuneCast.

This module contains the core domain models shared by the decision engine,
the learning component and the persistence layer. They are independent of
the database layer; see tunecast.db for their storage representation.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from tunecast.core.codecs import (
    get_canonical_codec,
    get_canonical_container,
    normalize_codec,
)
from tunecast.core.datetime_utils import to_iso, utc_now
from tunecast.domain.enums import (
    ClientType,
    PlaybackResult,
    PlayMethod,
    RuleSeverity,
    TranscodeCost,
)

DEFAULT_POLICY_RATIONALE = "Default pass-through, no policy influence."


def canonical_codec_key(codec: str | None) -> str:
    """Return the confidence-map key for a codec of unknown track type.

    Confidence maps hold video and audio codecs side by side, so a lookup
    tries the video alias groups first and falls back to the audio ones.
    """
    normalized = normalize_codec(codec)
    video = get_canonical_codec(normalized, "video")
    if video != normalized:
        return video
    return get_canonical_codec(normalized, "audio")


@dataclass
class ClientProfile:
    """What is known about one client device.

    A missing key in either confidence map means "no data", which is
    distinct from a stored 0.0 ("known not to work").
    """

    device_id: str
    client_type: ClientType = ClientType.UNKNOWN
    client_name: str = ""
    client_version: str = ""
    device_name: str = ""
    user_agent: str = ""
    # Canonical codec/container name -> likelihood of direct play, in [0, 1]
    codec_confidence: dict[str, float] = field(default_factory=dict)
    container_confidence: dict[str, float] = field(default_factory=dict)
    max_bitrate: int | None = None  # bits/second
    reliability_score: float = 0.5
    first_seen: datetime = field(default_factory=utc_now)
    last_updated: datetime = field(default_factory=utc_now)

    def confidence_for_codec(self, codec: str | None) -> float | None:
        """Return the stored codec confidence, or None when there is no data."""
        key = canonical_codec_key(codec)
        if not key:
            return None
        return self.codec_confidence.get(key)

    def confidence_for_container(self, container: str | None) -> float | None:
        """Return the stored container confidence, or None when there is no data."""
        key = get_canonical_container(container)
        if not key:
            return None
        return self.container_confidence.get(key)


@dataclass
class MediaCharacteristics:
    """Technical description of a media source, supplied pre-extracted.

    Codec and container names are canonicalized on construction so they
    line up with the keys of client confidence maps. Every numeric field is
    optional.
    """

    media_source_id: str = ""
    item_id: str = ""
    video_codec: str = ""
    audio_codec: str = ""
    container: str = ""
    bitrate: int | None = None  # bits/second
    width: int | None = None
    height: int | None = None
    video_bit_depth: int | None = None
    video_profile: str = ""
    video_range_type: str = ""  # "SDR", "HDR10", "HLG", "DOVI", ...
    audio_channels: int | None = None
    has_image_subtitles: bool = False
    has_text_subtitles: bool = False
    transcode_cost_estimate: TranscodeCost | None = None

    def __post_init__(self) -> None:
        self.video_codec = get_canonical_codec(self.video_codec, "video")
        self.audio_codec = get_canonical_codec(self.audio_codec, "audio")
        self.container = get_canonical_container(self.container)
        self.video_profile = self.video_profile or ""
        self.video_range_type = self.video_range_type or ""


@dataclass(frozen=True)
class RuleFinding:
    """Opinion produced by one rule for one (client, media) pair.

    Each flag is three-valued: None means the rule has no opinion on that
    dimension.
    """

    rule_name: str
    severity: RuleSeverity
    rationale: str
    allow_direct_play: bool | None = None
    allow_direct_stream: bool | None = None
    allow_transcoding: bool | None = None
    bitrate_cap: int | None = None


@dataclass
class PlaybackPolicy:
    """Advisory playback policy for one (client, media) pair."""

    allow_direct_play: bool = True
    allow_direct_stream: bool = True
    allow_transcoding: bool = True
    bitrate_cap: int | None = None
    confidence: float = 0.5
    rationale: str = ""

    @classmethod
    def default(cls) -> PlaybackPolicy:
        """Return the canonical pass-through policy."""
        return cls(
            allow_direct_play=True,
            allow_direct_stream=True,
            allow_transcoding=True,
            bitrate_cap=None,
            confidence=0.0,
            rationale=DEFAULT_POLICY_RATIONALE,
        )

    @property
    def is_default(self) -> bool:
        """Return True if this policy imposes nothing on the host."""
        return (
            self.allow_direct_play
            and self.allow_direct_stream
            and self.allow_transcoding
            and self.bitrate_cap is None
            and self.confidence <= 0.0
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "allow_direct_play": self.allow_direct_play,
            "allow_direct_stream": self.allow_direct_stream,
            "allow_transcoding": self.allow_transcoding,
            "bitrate_cap": self.bitrate_cap,
            "confidence": round(self.confidence, 4),
            "rationale": self.rationale,
        }

    def to_json(self) -> str:
        """Serialize as a compact JSON snapshot for telemetry."""
        return json.dumps(self.to_dict(), sort_keys=True)


@dataclass
class PlaybackOutcome:
    """Telemetry record of one playback session."""

    device_id: str
    play_session_id: str = ""
    client_name: str = ""
    item_id: str = ""
    video_codec: str = ""
    audio_codec: str = ""
    container: str = ""
    play_method: PlayMethod = PlayMethod.UNKNOWN
    transcode_reasons: str = ""
    result: PlaybackResult = PlaybackResult.UNKNOWN
    played_ticks: int | None = None
    total_ticks: int | None = None
    policy_snapshot: str = ""  # JSON text of the PlaybackPolicy in force
    timestamp: datetime = field(default_factory=utc_now)
    # Database ID, set once persisted
    id: int | None = None

    def __post_init__(self) -> None:
        self.video_codec = get_canonical_codec(self.video_codec, "video")
        self.audio_codec = get_canonical_codec(self.audio_codec, "audio")
        self.container = get_canonical_container(self.container)
        self.play_method = PlayMethod.parse(self.play_method)
        self.transcode_reasons = self.transcode_reasons or ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "id": self.id,
            "device_id": self.device_id,
            "client_name": self.client_name,
            "item_id": self.item_id,
            "play_session_id": self.play_session_id,
            "video_codec": self.video_codec,
            "audio_codec": self.audio_codec,
            "container": self.container,
            "play_method": self.play_method.value,
            "transcode_reasons": self.transcode_reasons,
            "result": self.result.value,
            "played_ticks": self.played_ticks,
            "total_ticks": self.total_ticks,
            "timestamp": to_iso(self.timestamp),
        }


@dataclass
class InterventionRecord:
    """Record of a policy the advisor computed for a session.

    is_active is False when the policy was only computed in dry-run mode
    (dynamic profiles disabled).
    """

    device_id: str
    media_source_id: str
    is_active: bool
    allow_direct_play: bool
    allow_direct_stream: bool
    allow_transcoding: bool
    confidence: float
    rationale: str = ""
    bitrate_cap: int | None = None
    device_name: str = ""
    client_name: str = ""
    timestamp: datetime = field(default_factory=utc_now)
    id: int | None = None

    @classmethod
    def from_policy(
        cls,
        policy: PlaybackPolicy,
        *,
        client: ClientProfile,
        media_source_id: str,
        is_active: bool,
    ) -> InterventionRecord:
        """Build a record from a computed policy."""
        return cls(
            device_id=client.device_id,
            device_name=client.device_name,
            client_name=client.client_name,
            media_source_id=media_source_id,
            is_active=is_active,
            allow_direct_play=policy.allow_direct_play,
            allow_direct_stream=policy.allow_direct_stream,
            allow_transcoding=policy.allow_transcoding,
            bitrate_cap=policy.bitrate_cap,
            confidence=policy.confidence,
            rationale=policy.rationale,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "id": self.id,
            "timestamp": to_iso(self.timestamp),
            "device_id": self.device_id,
            "device_name": self.device_name,
            "client_name": self.client_name,
            "media_source_id": self.media_source_id,
            "is_active": self.is_active,
            "allow_direct_play": self.allow_direct_play,
            "allow_direct_stream": self.allow_direct_stream,
            "allow_transcoding": self.allow_transcoding,
            "bitrate_cap": self.bitrate_cap,
            "confidence": round(self.confidence, 4),
            "rationale": self.rationale,
        }
