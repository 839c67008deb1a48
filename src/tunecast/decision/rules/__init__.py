"""Static compatibility rules.

Each rule module exposes RULE_NAME and a pure evaluate(client, media)
function backed by per-category tables. DEFAULT_RULES lists them in
registration order, which decides ties between equal-severity findings.
"""

from tunecast.decision.rules import audio, bit_depth, bitrate, container, hdr
from tunecast.decision.rules.base import PlaybackRule, RuleEvaluator

DEFAULT_RULES: tuple[PlaybackRule, ...] = (
    PlaybackRule(container.RULE_NAME, container.evaluate),
    PlaybackRule(bit_depth.RULE_NAME, bit_depth.evaluate),
    PlaybackRule(audio.RULE_NAME, audio.evaluate),
    PlaybackRule(hdr.RULE_NAME, hdr.evaluate),
    PlaybackRule(bitrate.RULE_NAME, bitrate.evaluate),
)

__all__ = [
    "DEFAULT_RULES",
    "PlaybackRule",
    "RuleEvaluator",
]
