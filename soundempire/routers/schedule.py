"""
Schedule router.

GET    /schedule/offers
POST   /schedule/bookings
DELETE /schedule/bookings/{engagement_id}
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from soundempire.db.base import get_db
from soundempire.routers.deps import get_rng, get_slot, run_action
from soundempire.schemas.actions import ActionResponse, BookingRequest
from soundempire.schemas.career import OfferPool
from soundempire.services import career, persistence
from soundempire.services.rng import RandomSource

router = APIRouter(prefix="/schedule", tags=["schedule"])


@router.get("/offers", response_model=OfferPool, summary="This week's offers")
def list_offers(
    db: Session = Depends(get_db),
    slot: str = Depends(get_slot),
    rng: RandomSource = Depends(get_rng),
):
    return persistence.load_state(db, slot, rng).offers


@router.post(
    "/bookings",
    response_model=ActionResponse,
    summary="Book an offer",
    responses={409: {"description": "No career exists yet."}},
)
def book(
    payload: BookingRequest,
    db: Session = Depends(get_db),
    slot: str = Depends(get_slot),
    rng: RandomSource = Depends(get_rng),
):
    """
    At most 5 gigs and 3 interviews may be outstanding. A full calendar or an
    offer that is no longer in the pool comes back as `rejection`.
    """
    offer = payload.to_offer()
    _, response = run_action(db, slot, rng, lambda s: career.book_offer(s, offer))
    return response


@router.delete(
    "/bookings/{engagement_id}",
    response_model=ActionResponse,
    summary="Cancel a booking",
    responses={409: {"description": "No career exists yet."}},
)
def cancel(
    engagement_id: str,
    db: Session = Depends(get_db),
    slot: str = Depends(get_slot),
    rng: RandomSource = Depends(get_rng),
):
    _, response = run_action(db, slot, rng, lambda s: career.cancel_engagement(s, engagement_id))
    return response
