"""Structured logging module for TuneCast.

Provides configurable logging with JSON format support and file rotation,
plus playback context injection for records emitted during a playback event.
"""

from tunecast.logging.config import configure_logging
from tunecast.logging.context import (
    PlaybackContextFilter,
    get_playback_context,
    playback_context,
)
from tunecast.logging.handlers import JSONFormatter

__all__ = [
    "JSONFormatter",
    "PlaybackContextFilter",
    "configure_logging",
    "get_playback_context",
    "playback_context",
]
