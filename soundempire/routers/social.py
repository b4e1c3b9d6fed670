"""
Social router.

POST /social/posts
POST /social/posts/{post_id}/like
POST /social/posts/{post_id}/comments
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from soundempire.db.base import get_db
from soundempire.routers.deps import get_rng, get_slot, run_action
from soundempire.schemas.actions import ActionResponse, CommentCreateRequest, PostCreateRequest
from soundempire.services import career
from soundempire.services.rng import RandomSource

router = APIRouter(prefix="/social", tags=["social"])

_NO_CAREER = {409: {"description": "No career exists yet."}}


@router.post("/posts", response_model=ActionResponse, summary="Publish a post", responses=_NO_CAREER)
def create_post(
    payload: PostCreateRequest,
    db: Session = Depends(get_db),
    slot: str = Depends(get_slot),
    rng: RandomSource = Depends(get_rng),
):
    """Costs 5 energy. Reach depends on the player's follower tier."""
    _, response = run_action(
        db, slot, rng, lambda s: career.create_post(s, payload.text, payload.pinned, rng),
    )
    return response


@router.post("/posts/{post_id}/like", response_model=ActionResponse, summary="Toggle like",
             responses=_NO_CAREER)
def like(
    post_id: str,
    db: Session = Depends(get_db),
    slot: str = Depends(get_slot),
    rng: RandomSource = Depends(get_rng),
):
    _, response = run_action(db, slot, rng, lambda s: career.like_post(s, post_id))
    return response


@router.post("/posts/{post_id}/comments", response_model=ActionResponse, summary="Comment on a post",
             responses=_NO_CAREER)
def comment(
    post_id: str,
    payload: CommentCreateRequest,
    db: Session = Depends(get_db),
    slot: str = Depends(get_slot),
    rng: RandomSource = Depends(get_rng),
):
    """Three comments per post per week."""
    _, response = run_action(db, slot, rng, lambda s: career.comment_on_post(s, post_id, payload.text))
    return response
