"""Arithmetic helpers shared by the engine stages."""
from __future__ import annotations

import math

from soundempire.schemas.career import WEEKS_PER_YEAR


def clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def round_half_up(x: float) -> int:
    """Round .5 away from zero for positives (Python's round() is banker's)."""
    return int(math.floor(x + 0.5))


def wrap_week(week: int) -> int:
    """Map a week number past the end of the year back into 1..52."""
    return (week - 1) % WEEKS_PER_YEAR + 1


def fmt_money(amount: float) -> str:
    return f"${round_half_up(amount):,}"
