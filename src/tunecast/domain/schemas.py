"""Pydantic models for documents handed in from outside.

Media and client descriptors arrive as JSON (CLI input files, host event
payloads). These models validate them and convert to the domain
dataclasses in tunecast.domain.models.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from tunecast.core.codecs import get_canonical_container
from tunecast.domain.enums import ClientType, TranscodeCost
from tunecast.domain.models import ClientProfile, MediaCharacteristics, canonical_codec_key

__all__ = [
    "ClientProfileModel",
    "MediaCharacteristicsModel",
    "ValidationError",
    "format_validation_error",
]


class MediaCharacteristicsModel(BaseModel):
    """Pydantic model for a media source descriptor."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    media_source_id: str = ""
    item_id: str = ""
    video_codec: str | None = None
    audio_codec: str | None = None
    container: str | None = None
    bitrate: int | None = Field(default=None, ge=0)
    width: int | None = Field(default=None, ge=0)
    height: int | None = Field(default=None, ge=0)
    video_bit_depth: int | None = Field(default=None, ge=1, le=16)
    video_profile: str | None = None
    video_range_type: str | None = None
    audio_channels: int | None = Field(default=None, ge=0)
    has_image_subtitles: bool = False
    has_text_subtitles: bool = False
    transcode_cost_estimate: str | None = None

    @field_validator("transcode_cost_estimate")
    @classmethod
    def validate_cost(cls, v: str | None) -> str | None:
        """Validate cost tier name."""
        if v is None:
            return None
        name = v.strip().upper()
        if name not in TranscodeCost.__members__:
            raise ValueError(
                f"Invalid transcode cost '{v}'. "
                f"Must be one of: {', '.join(m.name for m in TranscodeCost)}"
            )
        return name

    def to_domain(self) -> MediaCharacteristics:
        """Convert to a MediaCharacteristics dataclass."""
        cost = (
            TranscodeCost[self.transcode_cost_estimate]
            if self.transcode_cost_estimate
            else None
        )
        return MediaCharacteristics(
            media_source_id=self.media_source_id,
            item_id=self.item_id,
            video_codec=self.video_codec or "",
            audio_codec=self.audio_codec or "",
            container=self.container or "",
            bitrate=self.bitrate,
            width=self.width,
            height=self.height,
            video_bit_depth=self.video_bit_depth,
            video_profile=self.video_profile or "",
            video_range_type=self.video_range_type or "",
            audio_channels=self.audio_channels,
            has_image_subtitles=self.has_image_subtitles,
            has_text_subtitles=self.has_text_subtitles,
            transcode_cost_estimate=cost,
        )


class ClientProfileModel(BaseModel):
    """Pydantic model for a client descriptor."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    device_id: str = Field(min_length=1)
    client_type: str | None = None
    client_name: str = ""
    client_version: str = ""
    device_name: str = ""
    user_agent: str = ""
    codec_confidence: dict[str, float] = Field(default_factory=dict)
    container_confidence: dict[str, float] = Field(default_factory=dict)
    max_bitrate: int | None = Field(default=None, ge=1)

    @field_validator("codec_confidence", "container_confidence")
    @classmethod
    def validate_confidence_range(cls, v: dict[str, float]) -> dict[str, float]:
        """Validate every confidence lies in [0, 1] and casefold keys."""
        for key, value in v.items():
            if not 0.0 <= value <= 1.0:
                raise ValueError(
                    f"Confidence for '{key}' must be between 0 and 1, got {value}"
                )
        return {key.casefold().strip(): value for key, value in v.items()}

    def to_domain(self) -> ClientProfile:
        """Convert to a ClientProfile dataclass.

        When client_type is omitted, the category is resolved from the
        client and device names. Confidence keys are canonicalized so that
        e.g. "H265" lands on "hevc".
        """
        from tunecast.intelligence.clients import resolve_client_type

        if self.client_type:
            client_type = ClientType.from_string(self.client_type)
        else:
            client_type = resolve_client_type(self.client_name, self.device_name)

        return ClientProfile(
            device_id=self.device_id,
            client_type=client_type,
            client_name=self.client_name,
            client_version=self.client_version,
            device_name=self.device_name,
            user_agent=self.user_agent,
            codec_confidence={
                canonical_codec_key(k): v for k, v in self.codec_confidence.items()
            },
            container_confidence={
                get_canonical_container(k): v
                for k, v in self.container_confidence.items()
            },
            max_bitrate=self.max_bitrate,
        )


def format_validation_error(error: ValidationError) -> str:
    """Render a pydantic ValidationError as one line per field."""
    lines: list[str] = []
    for item in error.errors():
        loc: Any = ".".join(str(part) for part in item.get("loc", ())) or "<root>"
        lines.append(f"{loc}: {item.get('msg', 'invalid value')}")
    return "\n".join(lines)
