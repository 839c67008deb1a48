"""Bit depth compatibility rule.

H.264 above 8 bit (Hi10P) has no hardware decoder on mainstream clients.
12-bit video of any codec is rare enough that only clients with full
software decoding handle it.
"""

from __future__ import annotations

from tunecast.domain.enums import ClientType, RuleSeverity
from tunecast.domain.models import ClientProfile, MediaCharacteristics, RuleFinding

RULE_NAME = "bit_depth"

# Categories that decode high bit depth in software
SOFTWARE_DECODE_CLIENTS: frozenset[ClientType] = frozenset(
    {ClientType.DESKTOP, ClientType.KODI}
)


def evaluate(client: ClientProfile, media: MediaCharacteristics) -> RuleFinding | None:
    bit_depth = media.video_bit_depth
    if bit_depth is None or bit_depth <= 8:
        return None

    if media.video_codec == "h264" and bit_depth >= 10:
        return RuleFinding(
            rule_name="bit_depth.h264_hi10p",
            severity=RuleSeverity.REQUIRE,
            rationale=(
                f"H.264 at {bit_depth}-bit has no hardware decoder on mainstream "
                "clients. Transcode required."
            ),
            allow_direct_play=False,
            allow_transcoding=True,
        )

    if bit_depth >= 12 and client.client_type not in SOFTWARE_DECODE_CLIENTS:
        return RuleFinding(
            rule_name="bit_depth.12bit",
            severity=RuleSeverity.RECOMMEND,
            rationale="12-bit video has very limited client support. Transcode recommended.",
            allow_direct_play=False,
            allow_transcoding=True,
        )

    return None
