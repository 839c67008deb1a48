"""Aggregate playback statistics over stored outcomes and interventions."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field

from tunecast.domain.enums import PlaybackResult, PlayMethod
from tunecast.domain.models import InterventionRecord, PlaybackOutcome

_FAILURE_RESULTS = frozenset({PlaybackResult.FAILURE, PlaybackResult.SUSPECTED_FAILURE})


@dataclass
class PlaybackSummary:
    """Counts over a window of playback sessions."""

    total_sessions: int = 0
    direct_play: int = 0
    direct_stream: int = 0
    transcode: int = 0
    failures: int = 0
    active_interventions: int = 0
    dry_run_interventions: int = 0
    sessions_by_client: dict[str, int] = field(default_factory=dict)

    @property
    def direct_play_rate(self) -> float:
        """Fraction of sessions that direct played (0.0 with no sessions)."""
        if self.total_sessions == 0:
            return 0.0
        return self.direct_play / self.total_sessions

    def to_dict(self) -> dict:
        return {
            "total_sessions": self.total_sessions,
            "direct_play": self.direct_play,
            "direct_stream": self.direct_stream,
            "transcode": self.transcode,
            "failures": self.failures,
            "direct_play_rate": round(self.direct_play_rate, 4),
            "active_interventions": self.active_interventions,
            "dry_run_interventions": self.dry_run_interventions,
            "sessions_by_client": dict(self.sessions_by_client),
        }


def summarize_playback(
    outcomes: Iterable[PlaybackOutcome],
    interventions: Iterable[InterventionRecord] = (),
) -> PlaybackSummary:
    """Build a PlaybackSummary from outcomes and interventions."""
    summary = PlaybackSummary()
    methods: Counter[PlayMethod] = Counter()
    clients: Counter[str] = Counter()

    for outcome in outcomes:
        summary.total_sessions += 1
        methods[outcome.play_method] += 1
        clients[outcome.client_name or outcome.device_id] += 1
        if outcome.result in _FAILURE_RESULTS:
            summary.failures += 1

    summary.direct_play = methods[PlayMethod.DIRECT_PLAY]
    summary.direct_stream = methods[PlayMethod.DIRECT_STREAM]
    summary.transcode = methods[PlayMethod.TRANSCODE]
    summary.sessions_by_client = dict(clients.most_common())

    for record in interventions:
        if record.is_active:
            summary.active_interventions += 1
        else:
            summary.dry_run_interventions += 1

    return summary
