"""
Tests for the booking manager: capacity, offer matching and cancellation.
"""
import pytest

from soundempire.core.errors import CapacityExceededError, OfferUnavailableError
from soundempire.schemas.career import EngagementCategory, Offer, OfferPool
from soundempire.services import booking, career


def _gig(subtype="club", week=5, energy=12, money=500):
    return Offer(category=EngagementCategory.gig, subtype=subtype, target_week=week,
                 energy_cost=energy, money_reward=money, popularity_delta=1)


def _interview(subtype="radio", week=5, energy=8):
    return Offer(category=EngagementCategory.interview, subtype=subtype, target_week=week,
                 energy_cost=energy, money_reward=300, popularity_delta=1)


@pytest.fixture()
def stocked(new_career):
    new_career.offers = OfferPool(
        gigs=[_gig(week=w) for w in range(2, 10)],
        interviews=[_interview(week=w) for w in range(2, 8)],
    )
    return new_career


class TestBook:
    def test_book_moves_offer_into_schedule(self, stocked):
        offer = stocked.offers.gigs[0]
        engagement = booking.book(stocked, offer)
        assert engagement.id
        assert engagement.subtype == "club"
        assert engagement.target_week == offer.target_week
        assert stocked.schedule == [engagement]
        assert len(stocked.offers.gigs) == 7
        assert stocked.alerts[0].message.startswith("Booked club gig")

    def test_books_what_the_pool_offered(self, stocked):
        echoed = stocked.offers.gigs[0].model_copy(update={"money_reward": 999_999})
        engagement = booking.book(stocked, echoed)
        assert engagement.money_reward == 500

    def test_only_first_match_removed(self, stocked):
        stocked.offers.gigs = [_gig(week=4, money=100), _gig(week=4, money=200)]
        engagement = booking.book(stocked, _gig(week=4))
        assert engagement.money_reward == 100
        assert [o.money_reward for o in stocked.offers.gigs] == [200]

    def test_unknown_offer_rejected(self, stocked):
        with pytest.raises(OfferUnavailableError):
            booking.book(stocked, _gig(subtype="arena", week=40, energy=28))
        assert stocked.schedule == []

    def test_sixth_gig_rejected(self, stocked):
        for _ in range(5):
            booking.book(stocked, stocked.offers.gigs[0])
        with pytest.raises(CapacityExceededError) as exc:
            booking.book(stocked, stocked.offers.gigs[0])
        assert exc.value.details == {"category": "gig", "limit": 5}
        assert stocked.scheduled_count(EngagementCategory.gig) == 5

    def test_fourth_interview_rejected(self, stocked):
        for _ in range(3):
            booking.book(stocked, stocked.offers.interviews[0])
        with pytest.raises(CapacityExceededError):
            booking.book(stocked, stocked.offers.interviews[0])
        assert stocked.scheduled_count(EngagementCategory.interview) == 3

    def test_gig_capacity_independent_of_interviews(self, stocked):
        for _ in range(3):
            booking.book(stocked, stocked.offers.interviews[0])
        booking.book(stocked, stocked.offers.gigs[0])
        assert stocked.scheduled_count(EngagementCategory.gig) == 1


class TestCancel:
    def test_cancel_removes(self, stocked):
        engagement = booking.book(stocked, stocked.offers.gigs[0])
        removed = booking.cancel(stocked, engagement.id)
        assert removed.id == engagement.id
        assert stocked.schedule == []
        assert stocked.alerts[0].message == "Canceled: club gig"

    def test_cancel_unknown_is_noop(self, stocked):
        before = len(stocked.alerts)
        assert booking.cancel(stocked, "missing") is None
        assert len(stocked.alerts) == before


class TestBookingAction:
    def test_rejection_leaves_schedule_and_adds_one_alert(self, stocked):
        for _ in range(5):
            stocked = career.book_offer(stocked, stocked.offers.gigs[0]).state
        alerts_before = len(stocked.alerts)
        result = career.book_offer(stocked, stocked.offers.gigs[0])
        assert result.rejected
        assert result.rejection.code == "CAPACITY_EXCEEDED"
        assert len(result.state.schedule) == 5
        assert len(result.state.offers.gigs) == len(stocked.offers.gigs)
        assert len(result.state.alerts) == alerts_before + 1

    def test_action_does_not_touch_input(self, stocked):
        result = career.book_offer(stocked, stocked.offers.gigs[0])
        assert stocked.schedule == []
        assert len(result.state.schedule) == 1
