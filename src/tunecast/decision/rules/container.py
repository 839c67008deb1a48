"""Container/codec compatibility rule.

Flags containers and codec/container combinations a client category is
known to reject. Restrictions are checked in table order and the first
match fires.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from tunecast.core.codecs import UNIVERSAL_CONTAINERS
from tunecast.domain.enums import ClientType, RuleSeverity
from tunecast.domain.models import ClientProfile, MediaCharacteristics, RuleFinding

RULE_NAME = "container_codec"


@dataclass(frozen=True)
class ContainerRestriction:
    """One known incompatibility.

    A restriction matches when the container is in ``containers`` (if set),
    the video codec is in ``video_codecs`` (if set) and the container is not
    in ``allowed_containers``. ``message`` may use {container} and {codec}.
    """

    name: str
    severity: RuleSeverity
    fix: Literal["remux", "transcode"]
    message: str
    containers: frozenset[str] | None = None
    video_codecs: frozenset[str] | None = None
    allowed_containers: frozenset[str] = frozenset()

    def matches(self, container: str, video_codec: str) -> bool:
        if self.containers is not None and container not in self.containers:
            return False
        if self.video_codecs is not None and video_codec not in self.video_codecs:
            return False
        return container not in self.allowed_containers


_SWIFTFIN_RESTRICTIONS = (
    ContainerRestriction(
        name="swiftfin.container_limited",
        severity=RuleSeverity.RECOMMEND,
        fix="remux",
        containers=frozenset({"webm", "avi"}),
        message="Swiftfin has limited support for '{container}'. Remux recommended.",
    ),
)

CONTAINER_RESTRICTIONS: dict[ClientType, tuple[ContainerRestriction, ...]] = {
    ClientType.ROKU: (
        ContainerRestriction(
            name="roku.mkv_unsupported",
            severity=RuleSeverity.REQUIRE,
            fix="remux",
            containers=frozenset({"mkv"}),
            message="Roku cannot play MKV natively. Remux to MP4/HLS required.",
        ),
        ContainerRestriction(
            name="roku.hevc_container_mismatch",
            severity=RuleSeverity.REQUIRE,
            fix="remux",
            video_codecs=frozenset({"hevc"}),
            allowed_containers=UNIVERSAL_CONTAINERS,
            message="Roku only plays HEVC from MP4/M4V/MOV, not '{container}'.",
        ),
    ),
    ClientType.WEB_BROWSER: (
        ContainerRestriction(
            name="web.container_unsupported",
            severity=RuleSeverity.REQUIRE,
            fix="remux",
            containers=frozenset({"mkv", "avi", "wmv", "flv"}),
            message="Browsers cannot play '{container}' natively. Remux required.",
        ),
        ContainerRestriction(
            name="web.hevc_limited",
            severity=RuleSeverity.RECOMMEND,
            fix="transcode",
            video_codecs=frozenset({"hevc"}),
            message="Most browsers cannot decode HEVC. Transcode to H.264 required.",
        ),
    ),
    ClientType.SWIFTFIN_IOS: _SWIFTFIN_RESTRICTIONS,
    ClientType.SWIFTFIN_TVOS: _SWIFTFIN_RESTRICTIONS,
    ClientType.XBOX: (
        ContainerRestriction(
            name="xbox.container_limited",
            severity=RuleSeverity.RECOMMEND,
            fix="remux",
            containers=frozenset({"mkv", "webm"}),
            message="Xbox has limited '{container}' support. Remux to MP4 recommended.",
        ),
    ),
    ClientType.DLNA: (
        ContainerRestriction(
            name="dlna.container_unsupported",
            severity=RuleSeverity.REQUIRE,
            fix="remux",
            containers=frozenset({"mkv", "webm"}),
            message="Most DLNA renderers cannot play '{container}'. Remux to MPEG-TS/MP4.",
        ),
    ),
}


def evaluate(client: ClientProfile, media: MediaCharacteristics) -> RuleFinding | None:
    """Return a finding for the first restriction the pair hits."""
    if not media.container or not media.video_codec:
        return None

    for restriction in CONTAINER_RESTRICTIONS.get(client.client_type, ()):
        if not restriction.matches(media.container, media.video_codec):
            continue

        rationale = restriction.message.format(
            container=media.container, codec=media.video_codec
        )
        if restriction.fix == "remux":
            return RuleFinding(
                rule_name=restriction.name,
                severity=restriction.severity,
                rationale=rationale,
                allow_direct_play=False,
                allow_direct_stream=True,
            )
        return RuleFinding(
            rule_name=restriction.name,
            severity=restriction.severity,
            rationale=rationale,
            allow_direct_play=False,
            allow_transcoding=True,
        )

    return None
