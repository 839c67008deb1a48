"""TuneCast - advisory playback policy engine for media servers."""

__version__ = "0.1.0"
