"""
Tests for error handling: structured error responses, HTTP status codes,
and the custom exception classes.
"""
import pytest

from soundempire.core.errors import (
    BookingRejected,
    CapacityExceededError,
    CareerExistsError,
    CareerRejection,
    CommentLimitError,
    EmptyTitleError,
    InsufficientResourcesError,
    InvalidTrackCountError,
    NoCareerError,
    OfferUnavailableError,
    SaveDocumentError,
)
from soundempire.schemas.common import ErrorResponse


# ---------------------------------------------------------------------------
# Unit tests on exception classes
# ---------------------------------------------------------------------------

class TestExceptionClasses:
    def test_no_career(self):
        err = NoCareerError()
        assert err.http_status == 409
        assert err.code == "NO_CAREER"
        assert "details" not in err.to_dict()

    def test_capacity_exceeded(self):
        err = CapacityExceededError(category="gig", limit=5)
        assert isinstance(err, BookingRejected)
        assert isinstance(err, CareerRejection)
        assert err.http_status == 422
        assert err.message == "Maximum gigs (5) already scheduled."
        assert err.to_dict()["details"] == {"category": "gig", "limit": 5}

    def test_offer_unavailable(self):
        err = OfferUnavailableError(subtype="arena", week=12)
        assert err.code == "OFFER_UNAVAILABLE"
        assert err.details == {"subtype": "arena", "target_week": 12}

    def test_invalid_track_count(self):
        err = InvalidTrackCountError("EP", 3, 7, 2)
        assert err.message == "EP must have 3-7 tracks."
        assert err.details["received"] == 2

    def test_insufficient_resources(self):
        err = InsufficientResourcesError("Too tired.", resource="energy", required=10, available=4)
        assert err.details == {"resource": "energy", "required": 10, "available": 4}

    @pytest.mark.parametrize("err, code", [
        (EmptyTitleError("post"), "EMPTY_TITLE"),
        (CareerExistsError("Nova"), "CAREER_EXISTS"),
        (CommentLimitError(3), "COMMENT_LIMIT"),
    ])
    def test_rejection_codes(self, err, code):
        assert isinstance(err, CareerRejection)
        assert err.code == code

    def test_save_document_error_keeps_version(self):
        err = SaveDocumentError("bad", version=9)
        assert not isinstance(err, CareerRejection)
        assert err.details == {"schema_version": 9}
        assert SaveDocumentError("bad").details == {}

    def test_envelope_schema(self):
        payload = CapacityExceededError("interview", 3).to_dict()
        parsed = ErrorResponse(**payload)
        assert parsed.code == "CAPACITY_EXCEEDED"


# ---------------------------------------------------------------------------
# HTTP envelope
# ---------------------------------------------------------------------------

class TestErrorResponses:
    def test_no_career_envelope(self, client):
        r = client.post("/studio/drafts", json={"title": "x"})
        assert r.status_code == 409
        body = r.json()
        assert body["code"] == "NO_CAREER"
        assert "message" in body

    def test_validation_envelope_lists_fields(self, client):
        r = client.post("/career/profile", json={"artist_name": "X", "age": -3})
        assert r.status_code == 422
        body = r.json()
        assert body["code"] == "VALIDATION_ERROR"
        fields = [e["field"] for e in body["details"]["errors"]]
        assert "age" in fields

    def test_history_pagination_validated(self, client):
        r = client.get("/career/history", params={"limit": 0})
        assert r.status_code == 422
        assert r.json()["code"] == "VALIDATION_ERROR"
