"""
Career router.

GET    /career
DELETE /career
POST   /career/profile
POST   /career/advance
POST   /career/alerts/clear
GET    /career/history
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from soundempire.db.base import get_db
from soundempire.routers.deps import get_rng, get_slot, run_action, save_lock
from soundempire.schemas.actions import (
    ActionResponse,
    AdvanceResponse,
    ProfileCreateRequest,
    WeekReportOut,
    WeekSnapshotList,
    WeekSnapshotResponse,
)
from soundempire.schemas.career import CareerState
from soundempire.services import career, persistence
from soundempire.services.rng import RandomSource

router = APIRouter(prefix="/career", tags=["career"])


@router.get(
    "",
    response_model=CareerState,
    summary="Current career state",
    responses={200: {"description": "The saved state, or the empty initial state if none."}},
)
def get_career(
    db: Session = Depends(get_db),
    slot: str = Depends(get_slot),
    rng: RandomSource = Depends(get_rng),
):
    return persistence.load_state(db, slot, rng)


@router.delete(
    "",
    response_model=ActionResponse,
    summary="Delete the save and start over",
)
def delete_career(
    db: Session = Depends(get_db),
    slot: str = Depends(get_slot),
):
    """
    Removes the save slot and its week history. Works with or without a
    career, and never reads the stored document, so an unreadable save can
    still be reset.
    """
    result = career.delete_save(career.initial_state())
    with save_lock:
        persistence.delete_save(db, slot)
    return ActionResponse.from_result(result)


@router.post(
    "/profile",
    response_model=ActionResponse,
    summary="Create the artist profile",
    responses={200: {"description": "Career created, or rejected with an alert if one exists."}},
)
def create_profile(
    payload: ProfileCreateRequest,
    db: Session = Depends(get_db),
    slot: str = Depends(get_slot),
    rng: RandomSource = Depends(get_rng),
):
    profile = payload.to_profile()
    _, response = run_action(db, slot, rng, lambda s: career.create_profile(s, profile, rng))
    return response


@router.post(
    "/advance",
    response_model=AdvanceResponse,
    summary="Advance one week",
    responses={409: {"description": "No career exists yet."}},
)
def advance(
    db: Session = Depends(get_db),
    slot: str = Depends(get_slot),
    rng: RandomSource = Depends(get_rng),
):
    """
    Resolve this week's engagements, stream and chart every release, drift
    stats, then move the calendar on and regenerate offers and the feed.
    The processed week is written to the history.
    """
    with save_lock:
        result, _ = run_action(db, slot, rng, lambda s: career.advance(s, rng))
        report = result.outcome
        persistence.record_snapshot(db, slot, report, result.state)
    return AdvanceResponse.from_result(result, report=WeekReportOut.from_report(report))


@router.post(
    "/alerts/clear",
    response_model=ActionResponse,
    summary="Clear the alert log",
)
def clear_alerts(
    db: Session = Depends(get_db),
    slot: str = Depends(get_slot),
    rng: RandomSource = Depends(get_rng),
):
    _, response = run_action(db, slot, rng, career.clear_alerts)
    return response


@router.get(
    "/history",
    response_model=WeekSnapshotList,
    summary="Advanced weeks, newest first",
)
def history(
    limit: int = Query(default=20, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    slot: str = Depends(get_slot),
):
    rows, total = persistence.list_snapshots(db, slot, limit=limit, offset=offset)
    return WeekSnapshotList(
        items=[WeekSnapshotResponse.from_row(r) for r in rows],
        total=total,
        limit=limit,
        offset=offset,
    )
