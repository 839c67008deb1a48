"""Default bitrate ceilings per client category."""

from __future__ import annotations

from tunecast.decision.rules.base import format_mbps
from tunecast.domain.enums import ClientType, RuleSeverity
from tunecast.domain.models import ClientProfile, MediaCharacteristics, RuleFinding

RULE_NAME = "bitrate_cap"

MOBILE_CAP = 8_000_000
ROKU_CAP = 20_000_000
DLNA_CAP = 15_000_000

DEFAULT_BITRATE_CAPS: dict[ClientType, int] = {
    ClientType.ANDROID_MOBILE: MOBILE_CAP,
    ClientType.SWIFTFIN_IOS: MOBILE_CAP,
    ClientType.ROKU: ROKU_CAP,
    ClientType.DLNA: DLNA_CAP,
}


def evaluate(client: ClientProfile, media: MediaCharacteristics) -> RuleFinding | None:
    if media.bitrate is None:
        return None

    cap = DEFAULT_BITRATE_CAPS.get(client.client_type)
    if cap is None or media.bitrate <= cap:
        return None

    return RuleFinding(
        rule_name=f"bitrate_cap.{client.client_type.value}",
        severity=RuleSeverity.SUGGEST,
        rationale=(
            f"Media bitrate {format_mbps(media.bitrate)} exceeds the "
            f"{client.client_type.value} default cap of {format_mbps(cap)}."
        ),
        allow_transcoding=True,
        bitrate_cap=cap,
    )
