"""
Chart Ranking: order every released work by this week's streams.

Ties keep catalog order (Python's sort is stable). Positions are 1-based;
peak_pos only ever moves to a numerically lower rank.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Union

from soundempire.schemas.career import Project, Single


@dataclass
class ChartEntry:
    position: int
    work_id: str
    title: str
    streams: int
    previous_position: int | None
    peak_position: int


def rank(catalog: Sequence[Union[Single, Project]]) -> list[ChartEntry]:
    """Re-rank `catalog` in place and return the chart, best first."""
    ordered = sorted(catalog, key=lambda w: w.current_streams, reverse=True)
    chart: list[ChartEntry] = []
    for position, work in enumerate(ordered, start=1):
        previous = work.last_week_pos
        work.last_week_pos = position
        work.peak_pos = position if work.peak_pos is None else min(work.peak_pos, position)
        chart.append(ChartEntry(
            position=position,
            work_id=work.id,
            title=work.title,
            streams=work.current_streams,
            previous_position=previous,
            peak_position=work.peak_pos,
        ))
    return chart
