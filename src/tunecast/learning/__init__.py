"""Learning component: outcome classification and confidence updates."""

from tunecast.learning.classify import (
    MIN_PLAYBACK_RATIO_FOR_SUCCESS,
    Adjustments,
    classify_outcome,
    compute_adjustments,
    compute_playback_ratio,
    is_direct_play_success,
)
from tunecast.learning.service import LEARNING_RATE, LearningService, apply_adjustment

__all__ = [
    "LEARNING_RATE",
    "MIN_PLAYBACK_RATIO_FOR_SUCCESS",
    "Adjustments",
    "LearningService",
    "apply_adjustment",
    "classify_outcome",
    "compute_adjustments",
    "compute_playback_ratio",
    "is_direct_play_success",
]
