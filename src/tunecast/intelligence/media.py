"""Cache of media characteristics keyed by media source id."""

from __future__ import annotations

import logging
import threading

from tunecast.decision.cost import annotate_media
from tunecast.domain.models import MediaCharacteristics

logger = logging.getLogger(__name__)


class MediaRegistry:
    """Holds resolved media characteristics, annotated with their cost tier.

    Characteristics arrive pre-extracted; the registry only estimates the
    transcode cost once and remembers the result. Sources without an id are
    annotated but not cached.
    """

    def __init__(self) -> None:
        self._cache: dict[str, MediaCharacteristics] = {}
        self._lock = threading.Lock()

    def resolve(self, media: MediaCharacteristics) -> MediaCharacteristics:
        source_id = media.media_source_id
        with self._lock:
            cached = self._cache.get(source_id) if source_id else None
            if cached is not None:
                return cached
            annotate_media(media)
            if source_id:
                self._cache[source_id] = media

        logger.debug(
            "Resolved media %s: %s/%s in %s, %sx%s, cost=%s",
            source_id or "<no id>",
            media.video_codec,
            media.audio_codec,
            media.container,
            media.width,
            media.height,
            media.transcode_cost_estimate.name if media.transcode_cost_estimate else None,
        )
        return media

    def get(self, media_source_id: str) -> MediaCharacteristics | None:
        with self._lock:
            return self._cache.get(media_source_id)

    def invalidate(self, media_source_id: str) -> None:
        with self._lock:
            self._cache.pop(media_source_id, None)

    def invalidate_all(self) -> None:
        with self._lock:
            self._cache.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)
