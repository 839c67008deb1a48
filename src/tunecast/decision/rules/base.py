"""Rule type shared by every playback rule."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from tunecast.domain.models import ClientProfile, MediaCharacteristics, RuleFinding

RuleEvaluator = Callable[[ClientProfile, MediaCharacteristics], RuleFinding | None]


@dataclass(frozen=True)
class PlaybackRule:
    """A named, pure compatibility check.

    evaluate must not read or write client confidence, and returns None
    when the rule has no opinion for the pair.
    """

    name: str
    evaluate: RuleEvaluator

    def __call__(
        self, client: ClientProfile, media: MediaCharacteristics
    ) -> RuleFinding | None:
        return self.evaluate(client, media)


def format_mbps(bits_per_second: int) -> str:
    """Render a bitrate as e.g. '8.0 Mbps'."""
    return f"{bits_per_second / 1_000_000:.1f} Mbps"
