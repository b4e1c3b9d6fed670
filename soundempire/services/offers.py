"""
Offer Generator: the weekly marketplace of bookable gigs and interviews.

Contract
--------
generate_offers(week, popularity, reputation, rng) -> OfferPool
  gigs        6-8 offers
  interviews  5-7 offers

Gigs
  Venue tier drawn from a popularity-weighted table (club < concert <
  festival < arena). Festival and arena weights collapse to near zero
  below their popularity gates.
  payout = guarantee (venue base x demand 0.5-1.4)
         + sold-out bonus (15-40% of guarantee, chance rises with popularity)
         then x reputation multiplier (up to +12.5%)

Interviews
  radio / podcast / tv from fixed weights. TV needs popularity >= 65 or a
  5% lucky break; a gated-out TV draw is re-drawn from radio/podcast so the
  count contract always holds.

Every offer targets a week 1-10 ahead, wrapping past week 52. Energy cost and
stat deltas are fixed per subtype.
"""
from __future__ import annotations

from dataclasses import dataclass

from soundempire.core.numbers import round_half_up, wrap_week
from soundempire.schemas.career import EngagementCategory, Offer, OfferPool
from soundempire.services.rng import RandomSource


# ---------------------------------------------------------------------------
# Subtype table
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SubtypeSpec:
    energy: int
    popularity_delta: int
    reputation_delta: int


GIG_SPECS: dict[str, SubtypeSpec] = {
    "club":     SubtypeSpec(energy=12, popularity_delta=1, reputation_delta=0),
    "concert":  SubtypeSpec(energy=18, popularity_delta=2, reputation_delta=1),
    "festival": SubtypeSpec(energy=22, popularity_delta=3, reputation_delta=1),
    "arena":    SubtypeSpec(energy=28, popularity_delta=5, reputation_delta=2),
}

INTERVIEW_SPECS: dict[str, SubtypeSpec] = {
    "radio":   SubtypeSpec(energy=8,  popularity_delta=1, reputation_delta=0),
    "podcast": SubtypeSpec(energy=10, popularity_delta=1, reputation_delta=0),
    "tv":      SubtypeSpec(energy=14, popularity_delta=5, reputation_delta=1),
}

# Guarantee at demand 1.0, in dollars
VENUE_BASE: dict[str, int] = {
    "club": 400,
    "concert": 1200,
    "festival": 3500,
    "arena": 8000,
}

INTERVIEW_SCALE: dict[str, float] = {
    "radio": 0.6,
    "podcast": 0.8,
    "tv": 1.8,
}

INTERVIEW_WEIGHTS: list[tuple[str, float]] = [
    ("radio", 40),
    ("podcast", 35),
    ("tv", 25),
]

GIG_COUNT = (6, 8)
INTERVIEW_COUNT = (5, 7)
WEEKS_AHEAD = (1, 10)

FESTIVAL_GATE = 40
ARENA_GATE = 60
TV_GATE = 65
TV_LUCKY_BREAK = 0.05

_DEMAND_MIN = 0.5
_DEMAND_SPAN = 0.9
_SOLD_OUT_BASE_CHANCE = 0.05
_SOLD_OUT_CHANCE_PER_POP = 0.005
_SOLD_OUT_BONUS = (0.15, 0.40)
_REPUTATION_BONUS_MAX = 0.125


# ---------------------------------------------------------------------------
# Formulas
# ---------------------------------------------------------------------------

def venue_weights(popularity: int) -> list[tuple[str, float]]:
    festival = 10 + 0.25 * popularity if popularity >= FESTIVAL_GATE else 0.5
    arena = 5 + 0.3 * popularity if popularity >= ARENA_GATE else 0.25
    return [
        ("club", max(5.0, 45 - 0.35 * popularity)),
        ("concert", 30 + 0.1 * popularity),
        ("festival", festival),
        ("arena", arena),
    ]


def demand_multiplier(popularity: int) -> float:
    """0.5x at popularity 0 up to 1.4x at 100."""
    return _DEMAND_MIN + _DEMAND_SPAN * popularity / 100


def sold_out_chance(popularity: int) -> float:
    return _SOLD_OUT_BASE_CHANCE + _SOLD_OUT_CHANCE_PER_POP * popularity


def reputation_multiplier(reputation: int) -> float:
    return 1 + _REPUTATION_BONUS_MAX * reputation / 100


def payout_base(popularity: int, scale: float) -> int:
    """Flat media fee; also used for the viral interview bonus."""
    return round_half_up((200 + popularity * 12) * scale)


def target_week(current_week: int, rng: RandomSource) -> int:
    return wrap_week(current_week + rng.randint(*WEEKS_AHEAD))


# ---------------------------------------------------------------------------
# Single offers
# ---------------------------------------------------------------------------

def _gig_offer(current_week: int, popularity: int, reputation: int, rng: RandomSource) -> Offer:
    subtype = rng.weighted_choice(venue_weights(popularity))
    spec = GIG_SPECS[subtype]

    guarantee = VENUE_BASE[subtype] * demand_multiplier(popularity)
    sold_out = rng.chance(sold_out_chance(popularity))
    bonus = guarantee * rng.uniform(*_SOLD_OUT_BONUS) if sold_out else 0.0
    money = round_half_up((guarantee + bonus) * reputation_multiplier(reputation))

    return Offer(
        category=EngagementCategory.gig,
        subtype=subtype,
        target_week=target_week(current_week, rng),
        energy_cost=spec.energy,
        money_reward=money,
        popularity_delta=spec.popularity_delta,
        reputation_delta=spec.reputation_delta,
        sold_out=sold_out,
    )


def _interview_subtype(popularity: int, rng: RandomSource) -> str:
    subtype = rng.weighted_choice(INTERVIEW_WEIGHTS)
    if subtype == "tv" and popularity < TV_GATE and not rng.chance(TV_LUCKY_BREAK):
        subtype = rng.weighted_choice([w for w in INTERVIEW_WEIGHTS if w[0] != "tv"])
    return subtype


def _interview_offer(current_week: int, popularity: int, rng: RandomSource) -> Offer:
    subtype = _interview_subtype(popularity, rng)
    spec = INTERVIEW_SPECS[subtype]
    scale = INTERVIEW_SCALE[subtype] + (rng.random() - 0.5) * 0.2
    return Offer(
        category=EngagementCategory.interview,
        subtype=subtype,
        target_week=target_week(current_week, rng),
        energy_cost=spec.energy,
        money_reward=payout_base(popularity, scale),
        popularity_delta=spec.popularity_delta,
        reputation_delta=spec.reputation_delta,
    )


# ---------------------------------------------------------------------------
# Public
# ---------------------------------------------------------------------------

def generate_offers(
    week: int,
    popularity: int,
    reputation: int,
    rng: RandomSource,
) -> OfferPool:
    """Build a fresh offer pool for `week`. The previous pool is discarded by the caller."""
    gig_count = rng.randint(*GIG_COUNT)
    gigs = [_gig_offer(week, popularity, reputation, rng) for _ in range(gig_count)]

    interview_count = rng.randint(*INTERVIEW_COUNT)
    interviews = [_interview_offer(week, popularity, rng) for _ in range(interview_count)]

    return OfferPool(gigs=gigs, interviews=interviews)
