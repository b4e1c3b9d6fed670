"""
Weekly Advancement Engine: one call moves the career from week N to N+1.

Stages (strict order, each sees the previous stage's output)
------
  1. engagement resolution   cheapest-first under the energy budget; the
                             unaffordable are deferred one week, never dropped
  2. discovery & streaming   one stream entry per released work
  3. sales & certification
  4. chart ranking
  5. totals & stat drift     streaming payout, popularity/reputation drift,
                             then engagement deltas
  6. renewal                 energy resets only if nothing was completed;
                             inspiration always resets
  7. calendar advance
  8. regeneration            offers, player-post upkeep, fresh feed
  9. reporting               week summary replaced, alerts prepended

The engine never mutates its input: it works on a deep copy and returns the
new state, so an exception anywhere leaves the caller's state intact. No I/O.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from soundempire.core.numbers import clamp, fmt_money, round_half_up, wrap_week
from soundempire.schemas.career import (
    ENERGY_MAX,
    INSPIRATION_MAX,
    STAT_MAX,
    STAT_MIN,
    Alert,
    AlertKind,
    CareerClock,
    CareerState,
    Certification,
    EngagementCategory,
    ScheduledEngagement,
)
from soundempire.services import chart, sales, streaming
from soundempire.services.alerts import make_alert, push_alerts
from soundempire.services.feed import generate_feed
from soundempire.services.offers import generate_offers, payout_base
from soundempire.services.rng import RandomSource
from soundempire.services.social import refresh_player_posts

logger = logging.getLogger(__name__)

PAYOUT_PER_STREAM = 0.0035
POPULARITY_STREAM_DIVISOR = 200_000
REPUTATION_DRIFT = 0.2

VIRAL_SUBTYPES = ("radio", "podcast")
VIRAL_CHANCE = 0.08
VIRAL_POPULARITY = 3
VIRAL_PAYOUT_SCALE = 0.9
MAX_VIRAL_PER_WEEK = 1


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class CompletedEngagement:
    engagement: ScheduledEngagement
    viral_money: int = 0
    viral_popularity: int = 0

    @property
    def went_viral(self) -> bool:
        return self.viral_popularity > 0


@dataclass
class EngagementResolution:
    schedule: list[ScheduledEngagement]
    completed: list[CompletedEngagement]
    deferred: list[ScheduledEngagement]
    energy_available: int
    remaining_energy: int
    money: int = 0
    popularity: int = 0
    reputation: int = 0


@dataclass
class WeekReport:
    processed: CareerClock
    total_streams: int
    streaming_payout: float
    units_sold: int
    engagement_money: int
    popularity_before: int
    popularity_after: int
    reputation_before: int
    reputation_after: int
    completed: list[CompletedEngagement]
    deferred: list[ScheduledEngagement]
    chart: list[chart.ChartEntry]
    certifications: list[tuple[str, Certification]] = field(default_factory=list)
    followers_gained: int = 0
    summary: list[str] = field(default_factory=list)
    alerts: list[Alert] = field(default_factory=list)


@dataclass
class AdvanceResult:
    state: CareerState
    report: WeekReport


# ---------------------------------------------------------------------------
# Stage 1: engagements
# ---------------------------------------------------------------------------

def resolve_engagements(
    schedule: list[ScheduledEngagement],
    week: int,
    energy: int,
    popularity: int,
    rng: RandomSource,
) -> EngagementResolution:
    due = sorted((e for e in schedule if e.target_week == week), key=lambda e: e.energy_cost)
    untouched = [e for e in schedule if e.target_week != week]

    result = EngagementResolution(
        schedule=[], completed=[], deferred=[],
        energy_available=energy, remaining_energy=energy,
    )
    virals = 0
    for engagement in due:
        if result.remaining_energy < engagement.energy_cost:
            result.deferred.append(
                engagement.model_copy(update={"target_week": wrap_week(engagement.target_week + 1)})
            )
            continue

        result.remaining_energy -= engagement.energy_cost
        result.money += engagement.money_reward
        result.popularity += engagement.popularity_delta
        result.reputation += engagement.reputation_delta

        done = CompletedEngagement(engagement=engagement)
        if (
            engagement.category == EngagementCategory.interview
            and engagement.subtype in VIRAL_SUBTYPES
            and virals < MAX_VIRAL_PER_WEEK
            and rng.chance(VIRAL_CHANCE)
        ):
            virals += 1
            done.viral_money = payout_base(popularity, VIRAL_PAYOUT_SCALE)
            done.viral_popularity = VIRAL_POPULARITY
            result.money += done.viral_money
            result.popularity += done.viral_popularity
        result.completed.append(done)

    result.schedule = untouched + result.deferred
    return result


def _completed_message(done: CompletedEngagement, week: int) -> str:
    e = done.engagement
    rep = f"{e.reputation_delta:+d}" if e.reputation_delta else "0"
    message = (
        f"Completed {e.subtype} {e.category.value} (Week {week}): "
        f"+{fmt_money(e.money_reward)}, Pop +{e.popularity_delta}, Rep {rep}"
    )
    if e.sold_out:
        message += " (SOLD OUT)"
    if done.went_viral:
        message += f" (WENT VIRAL! +{fmt_money(done.viral_money)}, Pop +{done.viral_popularity})"
    return message


# ---------------------------------------------------------------------------
# Stage 5: drift
# ---------------------------------------------------------------------------

def _clamp_stat(value: float) -> int:
    return int(clamp(value, STAT_MIN, STAT_MAX))


def drift_stats(popularity: int, reputation: int, total_streams: int,
                resolution: EngagementResolution) -> tuple[int, int]:
    """Chart drift first, each re-clamped; engagement deltas on top, clamped again."""
    pop = _clamp_stat(round_half_up(clamp(popularity + total_streams / POPULARITY_STREAM_DIVISOR,
                                          STAT_MIN, STAT_MAX)))
    rep = _clamp_stat(round_half_up(clamp(reputation + REPUTATION_DRIFT, STAT_MIN, STAT_MAX)))
    return (
        _clamp_stat(pop + resolution.popularity),
        _clamp_stat(rep + resolution.reputation),
    )


# ---------------------------------------------------------------------------
# Public
# ---------------------------------------------------------------------------

def advance_week(state: CareerState, rng: RandomSource) -> AdvanceResult:
    new = state.model_copy(deep=True)
    processed = new.clock
    stats = new.stats
    pop_before, rep_before = stats.popularity, stats.reputation

    # 1. engagements
    resolution = resolve_engagements(new.schedule, processed.week, stats.energy, pop_before, rng)
    new.schedule = resolution.schedule
    logger.debug("week %s: %d completed, %d deferred, energy %d -> %d",
                 processed.label(), len(resolution.completed), len(resolution.deferred),
                 resolution.energy_available, resolution.remaining_energy)

    # 2-3. streaming, then sales on the same week's numbers
    total_streams = 0
    units_sold = 0
    certifications: list[tuple[str, Certification]] = []
    for work in new.catalog:
        total_streams += streaming.stream_week(work, pop_before, rep_before, rng)
        tier_before = work.certification
        units_sold += sales.record_week_sales(work, pop_before, rep_before)
        if work.certification != tier_before:
            certifications.append((work.title, work.certification))

    # 4. chart
    ranked = chart.rank(new.catalog)

    # 5. totals & drift
    payout = total_streams * PAYOUT_PER_STREAM
    stats.popularity, stats.reputation = drift_stats(pop_before, rep_before, total_streams, resolution)
    stats.money = round(stats.money + payout + resolution.money, 2)

    # 6. renewal
    stats.energy = ENERGY_MAX if not resolution.completed else int(
        clamp(resolution.remaining_energy, 0, ENERGY_MAX)
    )
    stats.inspiration = INSPIRATION_MAX

    # 7. calendar
    new.clock = processed.advanced()

    # 8. regeneration
    new.offers = generate_offers(new.clock.week, stats.popularity, stats.reputation, rng)
    followers_gained = refresh_player_posts(new, rng)
    events = [f"{d.engagement.subtype} {d.engagement.category.value}" for d in resolution.completed]
    new.social.feed = generate_feed(new, processed, rng, events)

    # 9. reporting
    report = WeekReport(
        processed=processed,
        total_streams=total_streams,
        streaming_payout=payout,
        units_sold=units_sold,
        engagement_money=resolution.money,
        popularity_before=pop_before,
        popularity_after=stats.popularity,
        reputation_before=rep_before,
        reputation_after=stats.reputation,
        completed=resolution.completed,
        deferred=resolution.deferred,
        chart=ranked,
        certifications=certifications,
        followers_gained=followers_gained,
    )
    _write_report(new, report)

    logger.info(
        "advanced %s -> %s: streams=%d payout=%.2f units=%d completed=%d deferred=%d",
        processed.label(), new.clock.label(), total_streams, payout, units_sold,
        len(resolution.completed), len(resolution.deferred),
    )
    return AdvanceResult(state=new, report=report)


# ---------------------------------------------------------------------------
# Stage 9: reporting
# ---------------------------------------------------------------------------

def _write_report(state: CareerState, report: WeekReport) -> None:
    week = report.processed.week
    summary = [
        f"{report.processed.label()}: {report.total_streams:,} streams "
        f"(+{fmt_money(report.streaming_payout)})",
    ]
    if state.catalog:
        summary.append(f"Sales: {report.units_sold:,} units across {len(state.catalog)} releases")

    alerts = [make_alert(
        state.clock,
        f"Week advanced: {report.total_streams:,} streams (+{fmt_money(report.streaming_payout)})",
    )]

    for done in report.completed:
        message = _completed_message(done, week)
        summary.append(message)
        alerts.append(make_alert(state.clock, message, AlertKind.success))

    for e in report.deferred:
        message = f"Not enough energy; postponed {e.subtype} {e.category.value} to Week {e.target_week}"
        summary.append(message)
        alerts.append(make_alert(state.clock, message))

    for label, before, after in (
        ("Popularity", report.popularity_before, report.popularity_after),
        ("Reputation", report.reputation_before, report.reputation_after),
    ):
        if after != before:
            summary.append(f"{label} {before} -> {after} ({after - before:+d})")

    positions = {entry.work_id: entry.position for entry in report.chart}
    for work in state.catalog:
        if work.weeks_on == 1:
            summary.append(
                f'"{work.title}" debuted at #{positions[work.id]} with '
                f"{work.current_streams:,} streams and {work.first_week_sales or 0:,} units"
            )

    for title, tier in report.certifications:
        message = f'"{title}" is now certified {tier.value.title()}!'
        summary.append(message)
        alerts.append(make_alert(state.clock, message, AlertKind.success))

    if report.followers_gained:
        summary.append(f"+{report.followers_gained:,} followers")

    report.summary = summary
    report.alerts = alerts
    state.week_summary = summary
    push_alerts(state, alerts)
