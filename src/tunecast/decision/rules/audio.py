"""Audio passthrough rule.

Flags audio codecs a client category can neither decode nor pass through.
Findings only allow transcoding, so the host can convert the audio track
alone and keep the video stream.
"""

from __future__ import annotations

from dataclasses import dataclass

from tunecast.core.codecs import DTS_FAMILY_CODECS, LOSSLESS_AUDIO_CODECS
from tunecast.domain.enums import ClientType, RuleSeverity
from tunecast.domain.models import ClientProfile, MediaCharacteristics, RuleFinding

RULE_NAME = "audio_passthrough"


@dataclass(frozen=True)
class AudioRestriction:
    name: str
    blocked_codecs: frozenset[str]
    severity: RuleSeverity
    message: str  # may use {codec}


AUDIO_RESTRICTIONS: dict[ClientType, AudioRestriction] = {
    ClientType.WEB_BROWSER: AudioRestriction(
        name="audio.web_unsupported",
        blocked_codecs=LOSSLESS_AUDIO_CODECS | DTS_FAMILY_CODECS,
        severity=RuleSeverity.REQUIRE,
        message="Browsers cannot decode '{codec}'. Audio transcode to AAC/Opus required.",
    ),
    ClientType.ANDROID_MOBILE: AudioRestriction(
        name="audio.mobile_no_passthrough",
        blocked_codecs=LOSSLESS_AUDIO_CODECS | DTS_FAMILY_CODECS,
        severity=RuleSeverity.REQUIRE,
        message="Mobile devices cannot pass through '{codec}'. Audio transcode required.",
    ),
    ClientType.ROKU: AudioRestriction(
        name="audio.roku_no_lossless",
        blocked_codecs=frozenset({"truehd", "dts-hd ma"}),
        severity=RuleSeverity.REQUIRE,
        message="Roku can neither decode nor pass through '{codec}'. Audio transcode required.",
    ),
    ClientType.SWIFTFIN_IOS: AudioRestriction(
        name="audio.ios_no_dts",
        blocked_codecs=DTS_FAMILY_CODECS,
        severity=RuleSeverity.REQUIRE,
        message="Apple devices have no native DTS support. Audio transcode of '{codec}' required.",
    ),
}

# Categories that decode everything in software
EXEMPT_CLIENTS: frozenset[ClientType] = frozenset({ClientType.DESKTOP, ClientType.KODI})

# Applied to every other category
GENERIC_RESTRICTION = AudioRestriction(
    name="audio.lossless_uncertain",
    blocked_codecs=LOSSLESS_AUDIO_CODECS,
    severity=RuleSeverity.SUGGEST,
    message="Lossless audio '{codec}' may not be supported. Audio transcode available as fallback.",
)


def restriction_for(client_type: ClientType) -> AudioRestriction | None:
    """Return the audio restriction that applies to a category, if any."""
    if client_type in EXEMPT_CLIENTS:
        return None
    return AUDIO_RESTRICTIONS.get(client_type, GENERIC_RESTRICTION)


def evaluate(client: ClientProfile, media: MediaCharacteristics) -> RuleFinding | None:
    if not media.audio_codec:
        return None

    restriction = restriction_for(client.client_type)
    if restriction is None or media.audio_codec not in restriction.blocked_codecs:
        return None

    return RuleFinding(
        rule_name=restriction.name,
        severity=restriction.severity,
        rationale=restriction.message.format(codec=media.audio_codec),
        allow_transcoding=True,
    )
