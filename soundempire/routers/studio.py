"""
Studio router: drafts and projects.

POST   /studio/drafts
DELETE /studio/drafts/{draft_id}
POST   /studio/drafts/{draft_id}/release
POST   /studio/projects
PUT    /studio/projects/{plan_id}
POST   /studio/projects/{plan_id}/release

Unknown ids are a no-op: the unchanged state comes back with no alerts.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from soundempire.db.base import get_db
from soundempire.routers.deps import get_rng, get_slot, run_action
from soundempire.schemas.actions import (
    ActionResponse,
    DraftCreateRequest,
    ProjectCreateRequest,
    ProjectUpdateRequest,
)
from soundempire.services import career
from soundempire.services.rng import RandomSource

router = APIRouter(prefix="/studio", tags=["studio"])

_NO_CAREER = {409: {"description": "No career exists yet."}}


@router.post("/drafts", response_model=ActionResponse, summary="Write a draft", responses=_NO_CAREER)
def write_draft(
    payload: DraftCreateRequest,
    db: Session = Depends(get_db),
    slot: str = Depends(get_slot),
    rng: RandomSource = Depends(get_rng),
):
    """Costs 10 energy and 15 inspiration."""
    _, response = run_action(db, slot, rng, lambda s: career.write_draft(s, payload.title, rng))
    return response


@router.delete("/drafts/{draft_id}", response_model=ActionResponse, summary="Discard a draft",
               responses=_NO_CAREER)
def discard_draft(
    draft_id: str,
    db: Session = Depends(get_db),
    slot: str = Depends(get_slot),
    rng: RandomSource = Depends(get_rng),
):
    _, response = run_action(db, slot, rng, lambda s: career.discard_draft(s, draft_id))
    return response


@router.post("/drafts/{draft_id}/release", response_model=ActionResponse,
             summary="Release a draft as a single", responses=_NO_CAREER)
def release_draft(
    draft_id: str,
    db: Session = Depends(get_db),
    slot: str = Depends(get_slot),
    rng: RandomSource = Depends(get_rng),
):
    _, response = run_action(db, slot, rng, lambda s: career.release_draft(s, draft_id))
    return response


@router.post("/projects", response_model=ActionResponse, summary="Start an EP or album",
             responses=_NO_CAREER)
def create_project(
    payload: ProjectCreateRequest,
    db: Session = Depends(get_db),
    slot: str = Depends(get_slot),
    rng: RandomSource = Depends(get_rng),
):
    _, response = run_action(db, slot, rng, lambda s: career.create_project(
        s, payload.title, payload.project_type, payload.track_ids,
    ))
    return response


@router.put("/projects/{plan_id}", response_model=ActionResponse, summary="Edit a project plan",
            responses=_NO_CAREER)
def update_project(
    plan_id: str,
    payload: ProjectUpdateRequest,
    db: Session = Depends(get_db),
    slot: str = Depends(get_slot),
    rng: RandomSource = Depends(get_rng),
):
    _, response = run_action(db, slot, rng, lambda s: career.update_project(
        s, plan_id, title=payload.title, project_type=payload.project_type,
        track_ids=payload.track_ids,
    ))
    return response


@router.post("/projects/{plan_id}/release", response_model=ActionResponse,
             summary="Release a project", responses=_NO_CAREER)
def release_project(
    plan_id: str,
    db: Session = Depends(get_db),
    slot: str = Depends(get_slot),
    rng: RandomSource = Depends(get_rng),
):
    """EP needs 3-7 tracks and $250, ALBUM 8-14 tracks and $750."""
    _, response = run_action(db, slot, rng, lambda s: career.release_project(s, plan_id))
    return response
