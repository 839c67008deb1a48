"""Decision engine: compute an advisory playback policy.

The engine runs in three passes over a draft policy:

1. Static rules. Every rule is evaluated; per dimension the most severe
   opinion wins, and later rules win ties between equal severities.
2. Confidence refinement. Client confidence for the video codec, audio
   codec and container adjusts the draft, followed by bitrate and
   transcode-cost annotation. A refinement never overrides a dimension
   decided by a REQUIRE finding.
3. Gating. Below LOW_CONFIDENCE the engine defers to the host by returning
   the pass-through policy.

The engine is pure with respect to its inputs: it never mutates the client
or media and never writes confidence.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from tunecast.config.models import PolicyConfig
from tunecast.decision.cost import estimate_transcode_cost
from tunecast.decision.rules import DEFAULT_RULES, PlaybackRule
from tunecast.decision.rules.base import format_mbps
from tunecast.domain.enums import RuleSeverity, TranscodeCost
from tunecast.domain.models import (
    ClientProfile,
    MediaCharacteristics,
    PlaybackPolicy,
    RuleFinding,
)
from tunecast.metrics import (
    POLICY_COMPUTE_DURATION,
    POLICY_COMPUTED,
    POLICY_DEFERRED,
    POLICY_FAST_EXIT,
    RULE_FAULTS,
    increment_counter,
    record_duration,
)

logger = logging.getLogger(__name__)

HIGH_CONFIDENCE = 0.7
LOW_CONFIDENCE = 0.4
BASE_CONFIDENCE = 0.5

# Confidence gained per static finding
REQUIRE_BONUS = 0.15
RECOMMEND_BONUS = 0.10

VIDEO_HIGH_BONUS = 0.2
VIDEO_LOW_PENALTY = 0.1
AUDIO_HIGH_BONUS = 0.05
AUDIO_LOW_PENALTY = 0.05
CONTAINER_HIGH_BONUS = 0.1

DIRECT_PLAY = "allow_direct_play"
DIRECT_STREAM = "allow_direct_stream"
TRANSCODING = "allow_transcoding"
_DIMENSIONS = (DIRECT_PLAY, DIRECT_STREAM, TRANSCODING)

_COST_NOTES: dict[TranscodeCost, str] = {
    TranscodeCost.EXTREME: "Transcode cost: EXTREME. Strongly prefer direct play.",
    TranscodeCost.HIGH: "Transcode cost: HIGH. Prefer direct play or direct stream.",
    TranscodeCost.MEDIUM: "Transcode cost: MEDIUM. Manageable, direct play still preferred.",
    TranscodeCost.LOW: "Transcode cost: LOW. Lightweight, no significant server impact.",
    TranscodeCost.REMUX: "Transcode cost: REMUX only. Repackaging is cheap, direct stream is fine.",
}


class _PolicyDraft:
    """Mutable working state for one computation."""

    def __init__(self) -> None:
        self.policy = PlaybackPolicy()
        self.confidence = BASE_CONFIDENCE
        self.lines: list[str] = []
        # Severity of the finding that decided each dimension
        self.decided: dict[str, RuleSeverity] = {}

    def note(self, line: str) -> None:
        self.lines.append(line)

    def refine(self, dimension: str, value: bool) -> None:
        """Set a dimension unless a REQUIRE finding already decided it."""
        if self.decided.get(dimension) == RuleSeverity.REQUIRE:
            return
        setattr(self.policy, dimension, value)

    def apply_findings(self, findings: Sequence[RuleFinding]) -> None:
        # sorted() is stable: equal severities keep registration order, and
        # >= below lets the later one win.
        for finding in sorted(findings, key=lambda f: f.severity, reverse=True):
            for dimension in _DIMENSIONS:
                value = getattr(finding, dimension)
                if value is None:
                    continue
                current = self.decided.get(dimension)
                if current is None or finding.severity >= current:
                    setattr(self.policy, dimension, value)
                    self.decided[dimension] = finding.severity

            if finding.bitrate_cap is not None:
                self.cap_bitrate(finding.bitrate_cap)

            if finding.severity == RuleSeverity.REQUIRE:
                self.confidence += REQUIRE_BONUS
            elif finding.severity == RuleSeverity.RECOMMEND:
                self.confidence += RECOMMEND_BONUS

    def cap_bitrate(self, cap: int) -> None:
        existing = self.policy.bitrate_cap
        self.policy.bitrate_cap = cap if existing is None else min(existing, cap)


def _evaluate_rules(
    rules: Sequence[PlaybackRule],
    client: ClientProfile,
    media: MediaCharacteristics,
    draft: _PolicyDraft,
) -> list[RuleFinding]:
    findings: list[RuleFinding] = []
    for rule in rules:
        try:
            finding = rule.evaluate(client, media)
        except Exception:
            logger.exception("Rule %s raised, skipping", rule.name)
            increment_counter(RULE_FAULTS, rule=rule.name)
            continue

        if finding is None:
            continue
        findings.append(finding)
        draft.note(f"[Rule:{finding.rule_name}] {finding.rationale}")
        logger.debug(
            "Rule %s fired for %s / %s: %s",
            finding.rule_name,
            client.device_id,
            media.media_source_id,
            finding.rationale,
        )
    return findings


def _refine_video(
    client: ClientProfile, media: MediaCharacteristics, draft: _PolicyDraft
) -> None:
    codec = media.video_codec
    if not codec:
        draft.note("No video codec info available. Allowing all methods.")
        return

    confidence = client.confidence_for_codec(codec)
    if confidence is None:
        draft.note(f"Video codec '{codec}': no confidence data, deferring.")
        return

    if confidence >= HIGH_CONFIDENCE:
        draft.refine(DIRECT_PLAY, True)
        draft.confidence += VIDEO_HIGH_BONUS
        draft.note(
            f"Video codec '{codec}' confidence {confidence:.2f}: favoring direct play."
        )
    elif confidence >= LOW_CONFIDENCE:
        draft.refine(DIRECT_PLAY, True)
        draft.refine(DIRECT_STREAM, True)
        draft.note(
            f"Video codec '{codec}' confidence {confidence:.2f}: "
            "allowing direct play with fallback."
        )
    else:
        draft.refine(DIRECT_PLAY, False)
        draft.refine(TRANSCODING, True)
        draft.confidence -= VIDEO_LOW_PENALTY
        draft.note(
            f"Video codec '{codec}' confidence {confidence:.2f}: "
            "likely unsupported, allowing transcode."
        )


def _refine_audio(
    client: ClientProfile,
    media: MediaCharacteristics,
    draft: _PolicyDraft,
    cost: TranscodeCost,
) -> None:
    codec = media.audio_codec
    if not codec:
        return

    confidence = client.confidence_for_codec(codec)
    if confidence is None:
        draft.note(f"Audio codec '{codec}': no confidence data, deferring.")
        return

    if confidence >= HIGH_CONFIDENCE:
        draft.confidence += AUDIO_HIGH_BONUS
        draft.note(f"Audio codec '{codec}' confidence {confidence:.2f}: compatible.")
    elif confidence >= LOW_CONFIDENCE:
        draft.note(
            f"Audio codec '{codec}' confidence {confidence:.2f}: "
            "may need audio transcode."
        )
    else:
        draft.refine(TRANSCODING, True)
        draft.confidence -= AUDIO_LOW_PENALTY
        draft.note(
            f"Audio codec '{codec}' confidence {confidence:.2f}: "
            "audio transcode likely required."
        )
        if draft.policy.allow_direct_play and cost <= TranscodeCost.REMUX:
            draft.refine(DIRECT_STREAM, True)
            draft.note(
                "Audio-only transcode is cheap. Preferring direct stream over "
                "a full video transcode."
            )


def _refine_container(
    client: ClientProfile, media: MediaCharacteristics, draft: _PolicyDraft
) -> None:
    container = media.container
    if not container:
        return

    confidence = client.confidence_for_container(container)
    if confidence is None:
        draft.note(f"Container '{container}': no confidence data, deferring.")
        return

    if confidence >= HIGH_CONFIDENCE:
        draft.confidence += CONTAINER_HIGH_BONUS
        draft.note(
            f"Container '{container}' confidence {confidence:.2f}: no remux needed."
        )
    elif confidence >= LOW_CONFIDENCE:
        draft.refine(DIRECT_STREAM, True)
        draft.note(
            f"Container '{container}' confidence {confidence:.2f}: may need remux."
        )
    elif draft.policy.allow_direct_play:
        draft.refine(DIRECT_PLAY, False)
        draft.refine(DIRECT_STREAM, True)
        draft.note(
            f"Container '{container}' confidence {confidence:.2f}: "
            "forcing remux over direct play."
        )


def _refine_bitrate(
    client: ClientProfile,
    media: MediaCharacteristics,
    config: PolicyConfig,
    draft: _PolicyDraft,
) -> None:
    ceiling = config.global_max_bitrate_override or client.max_bitrate
    if ceiling is None or media.bitrate is None or media.bitrate <= ceiling:
        return

    draft.cap_bitrate(ceiling)
    draft.refine(TRANSCODING, True)
    draft.note(
        f"Media bitrate {format_mbps(media.bitrate)} exceeds cap "
        f"{format_mbps(ceiling)}. Transcode may be needed."
    )


def _annotate_cost(cost: TranscodeCost, draft: _PolicyDraft) -> None:
    draft.note(_COST_NOTES[cost])
    if cost == TranscodeCost.EXTREME and not draft.policy.allow_direct_play:
        draft.note("WARNING: Direct play disallowed but transcode will be very expensive.")
    elif cost == TranscodeCost.REMUX:
        draft.refine(DIRECT_STREAM, True)


def _compute(
    client: ClientProfile,
    media: MediaCharacteristics,
    config: PolicyConfig,
    rules: Sequence[PlaybackRule],
) -> PlaybackPolicy:
    draft = _PolicyDraft()
    cost = media.transcode_cost_estimate
    if cost is None:
        cost = estimate_transcode_cost(media)

    findings = _evaluate_rules(rules, client, media, draft)
    draft.apply_findings(findings)

    _refine_video(client, media, draft)
    _refine_audio(client, media, draft, cost)
    _refine_container(client, media, draft)
    _refine_bitrate(client, media, config, draft)
    _annotate_cost(cost, draft)

    confidence = min(max(draft.confidence, 0.0), 1.0)
    if confidence < LOW_CONFIDENCE:
        logger.debug(
            "Low confidence (%.2f) for %s playing %s, deferring to host defaults",
            confidence,
            client.device_id,
            media.media_source_id,
        )
        increment_counter(POLICY_DEFERRED)
        return PlaybackPolicy.default()

    policy = draft.policy
    policy.confidence = confidence
    policy.rationale = "\n".join(draft.lines)

    logger.debug(
        "Policy for %s -> %s: direct_play=%s direct_stream=%s transcode=%s "
        "cap=%s confidence=%.2f",
        client.device_id,
        media.media_source_id,
        policy.allow_direct_play,
        policy.allow_direct_stream,
        policy.allow_transcoding,
        policy.bitrate_cap,
        policy.confidence,
    )
    increment_counter(POLICY_COMPUTED)
    return policy


def compute_policy(
    client: ClientProfile,
    media: MediaCharacteristics,
    config: PolicyConfig,
    rules: Sequence[PlaybackRule] = DEFAULT_RULES,
) -> PlaybackPolicy:
    """Compute the advisory playback policy for a (client, media) pair.

    Never raises: a faulty rule is skipped, and any other unexpected error
    yields the pass-through policy.

    Args:
        client: Client profile with its confidence maps.
        media: Media characteristics.
        config: Operator policy settings.
        rules: Static rules in registration order.

    Returns:
        The computed policy, or PlaybackPolicy.default() when conservative
        mode applies, confidence is too low, or computation failed.
    """
    if config.conservative_mode and not config.enable_dynamic_profiles:
        increment_counter(POLICY_FAST_EXIT)
        return PlaybackPolicy.default()

    try:
        with record_duration(POLICY_COMPUTE_DURATION):
            return _compute(client, media, config, rules)
    except Exception:
        logger.exception(
            "Policy computation failed for %s / %s, using default policy",
            client.device_id,
            media.media_source_id,
        )
        return PlaybackPolicy.default()


class DecisionEngine:
    """Policy computation bound to a configuration and rule set."""

    def __init__(
        self,
        config: PolicyConfig,
        rules: Sequence[PlaybackRule] = DEFAULT_RULES,
    ) -> None:
        self.config = config
        self.rules = tuple(rules)

    def compute(
        self, client: ClientProfile, media: MediaCharacteristics
    ) -> PlaybackPolicy:
        """Compute the policy for a pair; see compute_policy()."""
        return compute_policy(client, media, self.config, self.rules)
