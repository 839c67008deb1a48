"""Outcome classification and confidence adjustment magnitudes.

Pure functions shared by incremental learning and recalibration.
"""

from __future__ import annotations

from typing import NamedTuple

from tunecast.domain.enums import PlaybackResult, PlayMethod
from tunecast.domain.models import PlaybackOutcome

# Sessions that end before this fraction of the runtime count as failures
MIN_PLAYBACK_RATIO_FOR_SUCCESS = 0.15

SUCCESS_BOOST = 0.08
FAILURE_PENALTY = 0.12
SUSPECTED_FAILURE_PENALTY = 0.08
TRANSCODE_PENALTY = 0.05

# Share of the video magnitude applied to audio and container keys
AUDIO_SHARE = 0.5
CONTAINER_SHARE = 0.3


class Adjustments(NamedTuple):
    """Confidence deltas for one outcome, before the learning rate."""

    video: float
    audio: float
    container: float


def compute_playback_ratio(outcome: PlaybackOutcome) -> float | None:
    """Return played/total, or None when the ticks cannot give a ratio.

    Missing ticks, a non-positive total or negative played ticks (a
    malformed host report) all yield None.
    """
    if outcome.played_ticks is None or outcome.total_ticks is None:
        return None
    if outcome.total_ticks <= 0 or outcome.played_ticks < 0:
        return None
    return outcome.played_ticks / outcome.total_ticks


def classify_outcome(outcome: PlaybackOutcome) -> PlaybackResult:
    """Resolve an UNKNOWN result in place and return the result.

    A transcode session is TRANSCODED. Otherwise the playback ratio decides:
    below MIN_PLAYBACK_RATIO_FOR_SUCCESS is SUSPECTED_FAILURE, anything else
    SUCCESS. Without a usable ratio the result stays UNKNOWN. Results that
    are already known are never changed.
    """
    if outcome.result is not PlaybackResult.UNKNOWN:
        return outcome.result

    if outcome.play_method is PlayMethod.TRANSCODE:
        outcome.result = PlaybackResult.TRANSCODED
        return outcome.result

    ratio = compute_playback_ratio(outcome)
    if ratio is None:
        return outcome.result
    if ratio < MIN_PLAYBACK_RATIO_FOR_SUCCESS:
        outcome.result = PlaybackResult.SUSPECTED_FAILURE
    else:
        outcome.result = PlaybackResult.SUCCESS
    return outcome.result


def is_audio_only_transcode(transcode_reasons: str) -> bool:
    """True when the host's reasons mention audio but not video."""
    reasons = transcode_reasons.casefold()
    return "audio" in reasons and "video" not in reasons


def compute_adjustments(outcome: PlaybackOutcome) -> Adjustments:
    """Return the confidence deltas an already-classified outcome implies."""
    result = outcome.result
    direct_play = outcome.play_method is PlayMethod.DIRECT_PLAY

    video = audio = container = 0.0
    if result is PlaybackResult.SUCCESS:
        if direct_play:
            video = SUCCESS_BOOST
            audio = SUCCESS_BOOST * AUDIO_SHARE
            container = SUCCESS_BOOST * AUDIO_SHARE
        else:
            video = SUCCESS_BOOST * 0.5
    elif result is PlaybackResult.FAILURE:
        video = -FAILURE_PENALTY
        audio = -FAILURE_PENALTY * AUDIO_SHARE
        container = -FAILURE_PENALTY * CONTAINER_SHARE
    elif result is PlaybackResult.SUSPECTED_FAILURE:
        video = -SUSPECTED_FAILURE_PENALTY
        audio = -SUSPECTED_FAILURE_PENALTY * AUDIO_SHARE
        container = -SUSPECTED_FAILURE_PENALTY * CONTAINER_SHARE
    elif result is PlaybackResult.TRANSCODED:
        video = -TRANSCODE_PENALTY
        if is_audio_only_transcode(outcome.transcode_reasons):
            audio = -TRANSCODE_PENALTY

    return Adjustments(
        video=video if outcome.video_codec else 0.0,
        audio=audio if outcome.audio_codec else 0.0,
        container=container if outcome.container else 0.0,
    )


def is_direct_play_success(outcome: PlaybackOutcome) -> bool:
    """The success criterion used by recalibration."""
    return (
        outcome.result is PlaybackResult.SUCCESS
        and outcome.play_method is PlayMethod.DIRECT_PLAY
    )
