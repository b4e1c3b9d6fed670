"""
Discovery & streaming: this week's stream count for every released work.

discovery = 500 + (popularity*60 + reputation*40) * 4 + quality*20 + noise(0..800)
decay     = max(0.5, 1 - 0.08 * weeks_on)
streams   = max(0, round(discovery * decay))

Projects run the formula per track (track quality, project age) and chart on
the sum. Each call appends exactly one history entry and bumps weeks_on, so
len(streams_history) == weeks_on always holds.
"""
from __future__ import annotations

from typing import Union

from soundempire.core.numbers import round_half_up
from soundempire.schemas.career import Project, Single
from soundempire.services.rng import RandomSource

BASE_DISCOVERY = 500
POP_WEIGHT = 60
REP_WEIGHT = 40
STAT_SCALE = 4
QUALITY_WEIGHT = 20
NOISE_MAX = 800

DECAY_PER_WEEK = 0.08
MIN_DECAY = 0.5


def discovery_score(popularity: int, reputation: int, quality: int, noise: float) -> float:
    return (
        BASE_DISCOVERY
        + (popularity * POP_WEIGHT + reputation * REP_WEIGHT) * STAT_SCALE
        + quality * QUALITY_WEIGHT
        + noise
    )


def decay_factor(weeks_on: int) -> float:
    return max(MIN_DECAY, 1 - weeks_on * DECAY_PER_WEEK)


def weekly_streams(popularity: int, reputation: int, quality: int, weeks_on: int,
                   rng: RandomSource) -> int:
    discovery = discovery_score(popularity, reputation, quality, rng.uniform(0, NOISE_MAX))
    return max(0, round_half_up(discovery * decay_factor(weeks_on)))


def stream_week(work: Union[Single, Project], popularity: int, reputation: int,
                rng: RandomSource) -> int:
    """Append this week's streams to `work` (in place) and return them."""
    if isinstance(work, Project):
        total = 0
        for track in work.tracks:
            streams = weekly_streams(popularity, reputation, track.quality, work.weeks_on, rng)
            track.streams_history.append(streams)
            total += streams
    else:
        total = weekly_streams(popularity, reputation, work.quality, work.weeks_on, rng)

    work.streams_history.append(total)
    work.weeks_on += 1
    return total
