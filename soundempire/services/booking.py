"""
Booking Manager: commits a chosen offer to the schedule.

book(state, offer)             -> ScheduledEngagement  (mutates state)
cancel(state, engagement_id)   -> ScheduledEngagement | None

Offers have no identity; the originating offer is matched by
subtype + target week + energy cost and only the first match is removed.
Callers pass a working copy (see services/career.py); a raised
BookingRejected leaves that copy untouched.
"""
from __future__ import annotations

import logging
from typing import Optional

from soundempire.core.errors import CapacityExceededError, OfferUnavailableError
from soundempire.schemas.career import (
    AlertKind,
    CareerState,
    EngagementCategory,
    Offer,
    ScheduledEngagement,
)
from soundempire.services.alerts import make_alert, new_id, push_alerts

logger = logging.getLogger(__name__)

MAX_SCHEDULED: dict[EngagementCategory, int] = {
    EngagementCategory.gig: 5,
    EngagementCategory.interview: 3,
}


def _matches(candidate: Offer, offer: Offer) -> bool:
    return (
        candidate.subtype == offer.subtype
        and candidate.target_week == offer.target_week
        and candidate.energy_cost == offer.energy_cost
    )


def book(state: CareerState, offer: Offer) -> ScheduledEngagement:
    limit = MAX_SCHEDULED[offer.category]
    if state.scheduled_count(offer.category) >= limit:
        raise CapacityExceededError(category=offer.category.value, limit=limit)

    pool = state.offers.for_category(offer.category)
    index = next((i for i, o in enumerate(pool) if _matches(o, offer)), None)
    if index is None:
        raise OfferUnavailableError(subtype=offer.subtype, week=offer.target_week)

    # Book what the pool actually offered, not what the caller echoed back.
    source = pool.pop(index)
    engagement = ScheduledEngagement(id=new_id(), **source.model_dump())
    state.schedule.append(engagement)

    push_alerts(state, [make_alert(
        state.clock,
        f"Booked {engagement.subtype} {engagement.category.value} for Week {engagement.target_week}",
        AlertKind.success,
    )])
    logger.debug("booked %s %s for week %d", engagement.subtype, engagement.category.value,
                 engagement.target_week)
    return engagement


def cancel(state: CareerState, engagement_id: str) -> Optional[ScheduledEngagement]:
    found = next((e for e in state.schedule if e.id == engagement_id), None)
    if found is None:
        return None
    state.schedule = [e for e in state.schedule if e.id != engagement_id]
    push_alerts(state, [make_alert(
        state.clock, f"Canceled: {found.subtype} {found.category.value}",
    )])
    return found
