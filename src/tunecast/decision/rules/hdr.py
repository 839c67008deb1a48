"""HDR compatibility rule.

Each category has a separate outcome for Dolby Vision and for other HDR
formats (HDR10, HDR10+, HLG). Every finding disables direct play and
allows a tone-mapping transcode.
"""

from __future__ import annotations

from typing import NamedTuple

from tunecast.core.codecs import is_dolby_vision, is_hdr
from tunecast.domain.enums import ClientType, RuleSeverity
from tunecast.domain.models import ClientProfile, MediaCharacteristics, RuleFinding

RULE_NAME = "hdr"


class HdrOutcome(NamedTuple):
    severity: RuleSeverity
    message: str  # may use {range_type}


class HdrSupport(NamedTuple):
    """Per-category outcome; None means the category handles that format."""

    dolby_vision: HdrOutcome | None
    other_hdr: HdrOutcome | None


_NATIVE = HdrSupport(dolby_vision=None, other_hdr=None)

HDR_SUPPORT: dict[ClientType, HdrSupport] = {
    ClientType.WEB_BROWSER: HdrSupport(
        dolby_vision=HdrOutcome(
            RuleSeverity.REQUIRE,
            "Browsers cannot play Dolby Vision. Tone-mapping transcode to SDR required.",
        ),
        other_hdr=HdrOutcome(
            RuleSeverity.REQUIRE,
            "Browsers cannot display {range_type}. Tone-mapping transcode to SDR required.",
        ),
    ),
    ClientType.ANDROID_MOBILE: HdrSupport(
        dolby_vision=HdrOutcome(
            RuleSeverity.RECOMMEND,
            "Mobile devices typically cannot display {range_type}. Tone-mapping transcode required.",
        ),
        other_hdr=HdrOutcome(
            RuleSeverity.RECOMMEND,
            "Mobile devices typically cannot display {range_type}. Tone-mapping transcode required.",
        ),
    ),
    ClientType.ROKU: HdrSupport(
        dolby_vision=HdrOutcome(
            RuleSeverity.RECOMMEND,
            "Roku has limited Dolby Vision support. Tone-mapping transcode likely required.",
        ),
        other_hdr=None,
    ),
    ClientType.XBOX: HdrSupport(
        dolby_vision=HdrOutcome(
            RuleSeverity.RECOMMEND,
            "Xbox Dolby Vision support is limited. Tone-mapping transcode recommended.",
        ),
        other_hdr=None,
    ),
    ClientType.SWIFTFIN_IOS: HdrSupport(
        dolby_vision=HdrOutcome(
            RuleSeverity.SUGGEST,
            "Phone displays have limited {range_type} support. Tone-mapping transcode recommended.",
        ),
        other_hdr=HdrOutcome(
            RuleSeverity.SUGGEST,
            "Phone displays have limited {range_type} support. Tone-mapping transcode recommended.",
        ),
    ),
    ClientType.DESKTOP: _NATIVE,
    ClientType.KODI: _NATIVE,
    ClientType.SWIFTFIN_TVOS: _NATIVE,
}

# Every category not listed above
GENERIC_SUPPORT = HdrSupport(
    dolby_vision=HdrOutcome(
        RuleSeverity.SUGGEST,
        "Dolby Vision support is uncommon. Tone-mapping transcode may be required.",
    ),
    other_hdr=None,
)


def evaluate(client: ClientProfile, media: MediaCharacteristics) -> RuleFinding | None:
    if not is_hdr(media.video_range_type):
        return None

    dolby_vision = is_dolby_vision(media.video_range_type)
    support = HDR_SUPPORT.get(client.client_type, GENERIC_SUPPORT)
    outcome = support.dolby_vision if dolby_vision else support.other_hdr
    if outcome is None:
        return None

    kind = "dolby_vision" if dolby_vision else "tone_map"
    return RuleFinding(
        rule_name=f"hdr.{client.client_type.value}.{kind}",
        severity=outcome.severity,
        rationale=outcome.message.format(range_type=media.video_range_type),
        allow_direct_play=False,
        allow_transcoding=True,
    )
