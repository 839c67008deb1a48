"""Decision layer: static rules, transcode cost estimation and the engine."""

from tunecast.decision.cost import annotate_media, estimate_transcode_cost
from tunecast.decision.engine import (
    HIGH_CONFIDENCE,
    LOW_CONFIDENCE,
    DecisionEngine,
    compute_policy,
)
from tunecast.decision.rules import DEFAULT_RULES, PlaybackRule

__all__ = [
    "DEFAULT_RULES",
    "HIGH_CONFIDENCE",
    "LOW_CONFIDENCE",
    "DecisionEngine",
    "PlaybackRule",
    "annotate_media",
    "compute_policy",
    "estimate_transcode_cost",
]
