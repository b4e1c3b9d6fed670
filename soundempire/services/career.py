"""
Career actions: the player-facing action surface over a CareerState.

Every action is transactional. It runs against a deep copy of the state; if
it raises a CareerRejection the copy is thrown away and the rejection becomes
a single alert prepended to the *input* state's alert log. Domain data is
never partially updated.

Public API
----------
initial_state()                                    -> CareerState
create_profile(state, profile, rng)                -> ActionResult
write_draft(state, title, rng)                     -> ActionResult
discard_draft(state, draft_id)                     -> ActionResult
release_draft(state, draft_id)                     -> ActionResult
create_project(state, title, project_type, ids)    -> ActionResult
update_project(state, plan_id, ...)                -> ActionResult
release_project(state, plan_id)                    -> ActionResult
book_offer(state, offer)                           -> ActionResult
cancel_engagement(state, engagement_id)            -> ActionResult
advance(state, rng)                                -> ActionResult
create_post / like_post / comment_on_post          -> ActionResult
clear_alerts(state)                                -> ActionResult
delete_save(state)                                 -> ActionResult

Every action except create_profile and delete_save raises NoCareerError when
no profile exists yet. Unknown ids are a silent no-op.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from soundempire.core.errors import (
    CareerExistsError,
    CareerRejection,
    DuplicateTitleError,
    EmptyTitleError,
    InsufficientResourcesError,
    InvalidTrackCountError,
    NoCareerError,
    UnknownDraftError,
)
from soundempire.core.numbers import fmt_money, round_half_up
from soundempire.schemas.career import (
    Alert,
    AlertKind,
    CareerClock,
    CareerState,
    Difficulty,
    DraftTrack,
    Offer,
    Profile,
    Project,
    ProjectPlan,
    ProjectTrack,
    ProjectType,
    Single,
)
from soundempire.services import booking, social
from soundempire.services.advance import advance_week
from soundempire.services.alerts import make_alert, new_id, push_alerts
from soundempire.services.feed import seed_accounts
from soundempire.services.offers import generate_offers
from soundempire.services.rng import RandomSource

logger = logging.getLogger(__name__)

WRITE_COST_ENERGY = 10
WRITE_COST_INSPIRATION = 15

DRAFT_QUALITY = (55, 100)
HARD_DRAFT_QUALITY = (30, 100)


@dataclass(frozen=True)
class ProjectRule:
    min_tracks: int
    max_tracks: int
    production_fee: int


PROJECT_RULES: dict[ProjectType, ProjectRule] = {
    ProjectType.ep: ProjectRule(min_tracks=3, max_tracks=7, production_fee=250),
    ProjectType.album: ProjectRule(min_tracks=8, max_tracks=14, production_fee=750),
}


@dataclass
class ActionResult:
    state: CareerState
    alerts: list[Alert] = field(default_factory=list)
    rejection: Optional[CareerRejection] = None
    # Whatever the action produced: the new draft, the booked engagement, the week report...
    outcome: Any = None

    @property
    def rejected(self) -> bool:
        return self.rejection is not None


# ---------------------------------------------------------------------------
# Transaction wrapper
# ---------------------------------------------------------------------------

def _require_profile(state: CareerState) -> None:
    if state.profile is None:
        raise NoCareerError()


def _run(state: CareerState, name: str, action: Callable[[CareerState], Any],
         requires_profile: bool = True) -> ActionResult:
    if requires_profile:
        _require_profile(state)

    working = state.model_copy(deep=True)
    known = {a.id for a in state.alerts}
    try:
        outcome = action(working)
    except CareerRejection as exc:
        logger.info("%s rejected: %s (%s)", name, exc.code, exc.message)
        rejected = state.model_copy(deep=True)
        alert = make_alert(state.clock, exc.message, AlertKind.warning)
        push_alerts(rejected, [alert])
        return ActionResult(state=rejected, alerts=[alert], rejection=exc)

    logger.debug("%s applied", name)
    added = [a for a in working.alerts if a.id not in known]
    return ActionResult(state=working, alerts=added, outcome=outcome)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def initial_state() -> CareerState:
    return CareerState()


def rebuild_project_links(state: CareerState) -> None:
    """Recompute every draft's project_ids from the unreleased plans."""
    for draft in state.drafts:
        draft.project_ids = [p.id for p in state.projects if draft.id in p.track_ids]


def _taken_titles(state: CareerState) -> set[str]:
    return {d.title.casefold() for d in state.drafts} | {w.title.casefold() for w in state.catalog}


def _untitled(state: CareerState) -> str:
    taken = _taken_titles(state)
    n = len(state.drafts) + 1
    while f"untitled {n}" in taken:
        n += 1
    return f"Untitled {n}"


def _detach_drafts(state: CareerState, draft_ids: set[str]) -> None:
    state.drafts = [d for d in state.drafts if d.id not in draft_ids]
    for plan in state.projects:
        plan.track_ids = [t for t in plan.track_ids if t not in draft_ids]
    rebuild_project_links(state)


def _validate_plan(state: CareerState, title: str, track_ids: list[str],
                   plan_id: Optional[str] = None) -> tuple[str, list[str]]:
    title = (title or "").strip()
    if not title:
        raise EmptyTitleError("project title")
    if any(p.title.casefold() == title.casefold() and p.id != plan_id for p in state.projects):
        raise DuplicateTitleError(title)

    ids = list(dict.fromkeys(track_ids))
    missing = [i for i in ids if state.draft(i) is None]
    if missing:
        raise UnknownDraftError(missing)
    return title, ids


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------

def create_profile(state: CareerState, profile: Profile, rng: RandomSource) -> ActionResult:
    def action(s: CareerState) -> Profile:
        if s.profile is not None:
            raise CareerExistsError(s.profile.artist_name)
        artist_name = profile.artist_name.strip()
        if not artist_name:
            raise EmptyTitleError("artist name")

        s.profile = profile.model_copy(update={"artist_name": artist_name})
        s.clock = CareerClock(week=1, year=profile.start_year)
        s.offers = generate_offers(s.clock.week, s.stats.popularity, s.stats.reputation, rng)
        seed_accounts(s.social, artist_name)
        push_alerts(s, [make_alert(s.clock, f"Welcome, {artist_name}!")])
        logger.info("career created for %s (%s, %d)", artist_name,
                    profile.difficulty.value, profile.start_year)
        return s.profile

    return _run(state, "create_profile", action, requires_profile=False)


# ---------------------------------------------------------------------------
# Studio: drafts
# ---------------------------------------------------------------------------

def write_draft(state: CareerState, title: Optional[str], rng: RandomSource) -> ActionResult:
    def action(s: CareerState) -> DraftTrack:
        stats = s.stats
        if stats.energy < WRITE_COST_ENERGY:
            raise InsufficientResourcesError(
                "Too tired to write. Rest a bit first.",
                resource="energy", required=WRITE_COST_ENERGY, available=stats.energy,
            )
        if stats.inspiration < WRITE_COST_INSPIRATION:
            raise InsufficientResourcesError(
                "Not inspired enough to write. Rest a bit first.",
                resource="inspiration", required=WRITE_COST_INSPIRATION,
                available=stats.inspiration,
            )

        clean = (title or "").strip() or _untitled(s)
        if clean.casefold() in _taken_titles(s):
            raise DuplicateTitleError(clean)

        low, high = HARD_DRAFT_QUALITY if s.profile.difficulty == Difficulty.hard else DRAFT_QUALITY
        draft = DraftTrack(id=new_id(), title=clean, quality=rng.randint(low, high))
        s.drafts.insert(0, draft)
        stats.energy -= WRITE_COST_ENERGY
        stats.inspiration -= WRITE_COST_INSPIRATION
        push_alerts(s, [make_alert(s.clock, f'Wrote "{clean}" (quality {draft.quality})')])
        return draft

    return _run(state, "write_draft", action)


def discard_draft(state: CareerState, draft_id: str) -> ActionResult:
    def action(s: CareerState) -> Optional[DraftTrack]:
        draft = s.draft(draft_id)
        if draft is None:
            return None
        _detach_drafts(s, {draft_id})
        push_alerts(s, [make_alert(s.clock, f'Discarded "{draft.title}"')])
        return draft

    return _run(state, "discard_draft", action)


def release_draft(state: CareerState, draft_id: str) -> ActionResult:
    def action(s: CareerState) -> Optional[Single]:
        draft = s.draft(draft_id)
        if draft is None:
            return None
        single = Single(
            id=draft.id,
            title=draft.title,
            quality=draft.quality,
            week_released=s.clock.week,
            year_released=s.clock.year,
        )
        s.catalog.insert(0, single)
        _detach_drafts(s, {draft_id})
        push_alerts(s, [make_alert(s.clock, f'Released "{draft.title}"', AlertKind.success)])
        return single

    return _run(state, "release_draft", action)


# ---------------------------------------------------------------------------
# Studio: projects
# ---------------------------------------------------------------------------

def create_project(state: CareerState, title: str, project_type: ProjectType,
                   track_ids: list[str]) -> ActionResult:
    def action(s: CareerState) -> ProjectPlan:
        clean, ids = _validate_plan(s, title, track_ids)
        plan = ProjectPlan(id=new_id(), title=clean, project_type=project_type, track_ids=ids)
        s.projects.insert(0, plan)
        rebuild_project_links(s)
        push_alerts(s, [make_alert(s.clock, f'Started {project_type.value} "{clean}"')])
        return plan

    return _run(state, "create_project", action)


def update_project(state: CareerState, plan_id: str, title: Optional[str] = None,
                   project_type: Optional[ProjectType] = None,
                   track_ids: Optional[list[str]] = None) -> ActionResult:
    def action(s: CareerState) -> Optional[ProjectPlan]:
        plan = s.plan(plan_id)
        if plan is None:
            return None
        clean, ids = _validate_plan(
            s,
            plan.title if title is None else title,
            plan.track_ids if track_ids is None else track_ids,
            plan_id=plan.id,
        )
        plan.title = clean
        plan.track_ids = ids
        if project_type is not None:
            plan.project_type = project_type
        rebuild_project_links(s)
        return plan

    return _run(state, "update_project", action)


def release_project(state: CareerState, plan_id: str) -> ActionResult:
    def action(s: CareerState) -> Optional[Project]:
        plan = s.plan(plan_id)
        if plan is None:
            return None

        rule = PROJECT_RULES[plan.project_type]
        count = len(plan.track_ids)
        if not rule.min_tracks <= count <= rule.max_tracks:
            raise InvalidTrackCountError(plan.project_type.value, rule.min_tracks,
                                         rule.max_tracks, count)
        missing = [i for i in plan.track_ids if s.draft(i) is None]
        if missing:
            raise UnknownDraftError(missing)
        if s.stats.money < rule.production_fee:
            raise InsufficientResourcesError(
                f"Production costs {fmt_money(rule.production_fee)}. Not enough money.",
                resource="money", required=rule.production_fee, available=s.stats.money,
            )

        drafts = [s.draft(i) for i in plan.track_ids]
        project = Project(
            id=plan.id,
            title=plan.title,
            project_type=plan.project_type,
            quality=round_half_up(sum(d.quality for d in drafts) / len(drafts)),
            week_released=s.clock.week,
            year_released=s.clock.year,
            tracks=[ProjectTrack(id=d.id, title=d.title, quality=d.quality) for d in drafts],
        )
        s.catalog.insert(0, project)
        s.projects = [p for p in s.projects if p.id != plan.id]
        _detach_drafts(s, set(plan.track_ids))
        s.stats.money = round(s.stats.money - rule.production_fee, 2)
        push_alerts(s, [make_alert(
            s.clock, f'Released {plan.project_type.value}: "{plan.title}"', AlertKind.success,
        )])
        return project

    return _run(state, "release_project", action)


# ---------------------------------------------------------------------------
# Schedule
# ---------------------------------------------------------------------------

def book_offer(state: CareerState, offer: Offer) -> ActionResult:
    return _run(state, "book_offer", lambda s: booking.book(s, offer))


def cancel_engagement(state: CareerState, engagement_id: str) -> ActionResult:
    return _run(state, "cancel_engagement", lambda s: booking.cancel(s, engagement_id))


def advance(state: CareerState, rng: RandomSource) -> ActionResult:
    """Advance one week. Never rejected; `outcome` carries the WeekReport."""
    _require_profile(state)
    result = advance_week(state, rng)
    return ActionResult(state=result.state, alerts=result.report.alerts, outcome=result.report)


# ---------------------------------------------------------------------------
# Social
# ---------------------------------------------------------------------------

def create_post(state: CareerState, text: str, pinned: bool, rng: RandomSource) -> ActionResult:
    def action(s: CareerState):
        post = social.create_post(s, text, pinned, rng)
        push_alerts(s, [make_alert(s.clock, "Posted to your feed", AlertKind.success)])
        return post

    return _run(state, "create_post", action)


def like_post(state: CareerState, post_id: str) -> ActionResult:
    return _run(state, "like_post", lambda s: social.like_post(s, post_id))


def comment_on_post(state: CareerState, post_id: str, text: str) -> ActionResult:
    return _run(state, "comment_on_post", lambda s: social.comment_on_post(s, post_id, text))


# ---------------------------------------------------------------------------
# Housekeeping
# ---------------------------------------------------------------------------

def clear_alerts(state: CareerState) -> ActionResult:
    def action(s: CareerState) -> int:
        cleared = len(s.alerts)
        s.alerts = []
        return cleared

    return _run(state, "clear_alerts", action)


def delete_save(state: CareerState) -> ActionResult:
    if state.profile is not None:
        logger.info("career for %s deleted", state.profile.artist_name)
    return ActionResult(state=initial_state())
