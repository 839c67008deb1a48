"""Playback telemetry: session recording and aggregate statistics."""

from tunecast.telemetry.service import TelemetryService
from tunecast.telemetry.stats import PlaybackSummary, summarize_playback

__all__ = ["PlaybackSummary", "TelemetryService", "summarize_playback"]
