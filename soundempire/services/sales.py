"""
Sales & Certification.

Singles   units = streams // 150
Projects  units = sum(track streams) // 1500
          + release bump in the first active week:
            round((3*popularity + reputation) * size)   EP 1.0, ALBUM 2.0

Certification tiers are cumulative-unit thresholds, separate per kind.
A recompute can jump several tiers at once and never lowers the tier.
"""
from __future__ import annotations

from typing import Union

from soundempire.core.numbers import round_half_up
from soundempire.schemas.career import Certification, Project, ProjectType, Single

STREAMS_PER_UNIT_SINGLE = 150
STREAMS_PER_UNIT_PROJECT = 1500

RELEASE_BUMP_POP_WEIGHT = 3
RELEASE_BUMP_REP_WEIGHT = 1
RELEASE_BUMP_SIZE: dict[ProjectType, float] = {
    ProjectType.ep: 1.0,
    ProjectType.album: 2.0,
}

# Ascending (tier, units) per kind
SINGLE_THRESHOLDS: list[tuple[Certification, int]] = [
    (Certification.gold, 5_000),
    (Certification.platinum, 10_000),
    (Certification.diamond, 50_000),
]
PROJECT_THRESHOLDS: list[tuple[Certification, int]] = [
    (Certification.gold, 2_500),
    (Certification.platinum, 5_000),
    (Certification.diamond, 25_000),
]


def release_bump(project_type: ProjectType, popularity: int, reputation: int) -> int:
    raw = popularity * RELEASE_BUMP_POP_WEIGHT + reputation * RELEASE_BUMP_REP_WEIGHT
    return round_half_up(raw * RELEASE_BUMP_SIZE[project_type])


def units_for_streams(work: Union[Single, Project], streams: int) -> int:
    divisor = STREAMS_PER_UNIT_PROJECT if isinstance(work, Project) else STREAMS_PER_UNIT_SINGLE
    return max(0, streams) // divisor


def certification_for(work: Union[Single, Project], units: int) -> Certification:
    thresholds = PROJECT_THRESHOLDS if isinstance(work, Project) else SINGLE_THRESHOLDS
    tier = Certification.none
    for candidate, needed in thresholds:
        if units >= needed:
            tier = candidate
    return tier


def recompute_certification(work: Union[Single, Project]) -> Certification:
    """Raise `work.certification` to what lifetime sales earn. Returns the new tier."""
    earned = certification_for(work, work.sales_lifetime)
    if earned.rank > work.certification.rank:
        work.certification = earned
    return work.certification


def record_week_sales(work: Union[Single, Project], popularity: int, reputation: int) -> int:
    """
    Convert the work's latest stream entry into sales units, in place.
    Must run after streaming for the same week.
    """
    if isinstance(work, Project):
        streams = sum(t.streams_history[-1] for t in work.tracks if t.streams_history)
    else:
        streams = work.current_streams

    units = units_for_streams(work, streams)
    first_week = work.weeks_on == 1
    if isinstance(work, Project) and first_week:
        units += release_bump(work.project_type, popularity, reputation)

    work.sales_history.append(units)
    work.sales_lifetime += units
    if first_week:
        work.first_week_sales = units
    recompute_certification(work)
    return units
