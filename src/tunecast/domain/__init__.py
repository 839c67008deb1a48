"""Domain models and enums for TuneCast.

This package contains core domain types that are independent of the database layer:

- Domain models: ClientProfile, MediaCharacteristics, RuleFinding,
  PlaybackPolicy, PlaybackOutcome, InterventionRecord
- Domain enums: ClientType, RuleSeverity, TranscodeCost, PlaybackResult,
  PlayMethod

Usage:
    from tunecast.domain import ClientProfile, MediaCharacteristics
    from tunecast.domain import PlaybackPolicy, RuleSeverity
"""

from .enums import (
    ClientType,
    PlaybackResult,
    PlayMethod,
    RuleSeverity,
    TranscodeCost,
)
from .models import (
    DEFAULT_POLICY_RATIONALE,
    ClientProfile,
    InterventionRecord,
    MediaCharacteristics,
    PlaybackOutcome,
    PlaybackPolicy,
    RuleFinding,
    canonical_codec_key,
)

__all__ = [
    # Models
    "ClientProfile",
    "MediaCharacteristics",
    "RuleFinding",
    "PlaybackPolicy",
    "PlaybackOutcome",
    "InterventionRecord",
    "DEFAULT_POLICY_RATIONALE",
    "canonical_codec_key",
    # Enums
    "ClientType",
    "RuleSeverity",
    "TranscodeCost",
    "PlaybackResult",
    "PlayMethod",
]
