"""Client and media intelligence: identity resolution and caches."""

from tunecast.intelligence.clients import (
    BASELINE_CODEC_CONFIDENCE,
    BASELINE_CONTAINER_CONFIDENCE,
    ClientRegistry,
    SessionDescriptor,
    apply_baseline_confidence,
    resolve_client_type,
)
from tunecast.intelligence.media import MediaRegistry

__all__ = [
    "BASELINE_CODEC_CONFIDENCE",
    "BASELINE_CONTAINER_CONFIDENCE",
    "ClientRegistry",
    "MediaRegistry",
    "SessionDescriptor",
    "apply_baseline_confidence",
    "resolve_client_type",
]
