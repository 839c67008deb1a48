"""Playback context for structured logging.

Uses contextvars so that every record emitted while one playback event is
being processed carries the device id and media source id, across threads
and without passing them down the call chain.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

_device_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "device_id", default=None
)
_media_source_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "media_source_id", default=None
)


@contextmanager
def playback_context(
    device_id: str | None,
    media_source_id: str | None = None,
) -> Generator[None, None, None]:
    """Bind a device and media source to log records for the block.

    The previous context is restored on exit, so contexts nest.

    Example:
        with playback_context("dev-1", "ms-42"):
            logger.info("Computing policy")  # tagged [dev-1/ms-42]
    """
    device_token = _device_id.set(device_id or None)
    media_token = _media_source_id.set(media_source_id or None)
    try:
        yield
    finally:
        _media_source_id.reset(media_token)
        _device_id.reset(device_token)


def get_playback_context() -> tuple[str | None, str | None]:
    """Return (device_id, media_source_id) for the current context."""
    return _device_id.get(), _media_source_id.get()


class PlaybackContextFilter(logging.Filter):
    """Logging filter that injects playback context into log records.

    Adds device_id and media_source_id attributes for JSON output and a
    compact playback_tag ("[dev-1/ms-42] ") for the text format.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        device_id, media_source_id = get_playback_context()
        record.device_id = device_id
        record.media_source_id = media_source_id

        if device_id and media_source_id:
            record.playback_tag = f"[{device_id}/{media_source_id}] "
        elif device_id:
            record.playback_tag = f"[{device_id}] "
        else:
            record.playback_tag = ""

        return True  # Enrich only, never drop
