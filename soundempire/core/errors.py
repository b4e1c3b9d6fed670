"""
Custom exception hierarchy for the career engine.

Rule: every error has a machine-readable `code` string so the presentation
layer can branch on it without parsing English messages.

Two families:
  - CareerRejection: a player action failed validation. The action wrapper in
    services/career.py turns these into non-fatal alerts; the store is left
    unchanged.
  - everything else: surfaced as an HTTP error envelope by the handlers below.
"""
from __future__ import annotations

import logging
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exception classes
# ---------------------------------------------------------------------------

class CareerException(Exception):
    """Base class for all application-level errors."""
    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class NoCareerError(CareerException):
    http_status = status.HTTP_409_CONFLICT
    code = "NO_CAREER"

    def __init__(self):
        super().__init__(message="No career exists yet. Create a profile first.")


class SaveDocumentError(CareerException):
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "SAVE_DOCUMENT_INVALID"

    def __init__(self, message: str, version: Any = None):
        super().__init__(
            message=message,
            details={"schema_version": version} if version is not None else {},
        )


# ---------------------------------------------------------------------------
# Validation rejections (reported as alerts, never fatal)
# ---------------------------------------------------------------------------

class CareerRejection(CareerException):
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "REJECTED"


class BookingRejected(CareerRejection):
    code = "BOOKING_REJECTED"


class CapacityExceededError(BookingRejected):
    code = "CAPACITY_EXCEEDED"

    def __init__(self, category: str, limit: int):
        super().__init__(
            message=f"Maximum {category}s ({limit}) already scheduled.",
            details={"category": category, "limit": limit},
        )


class OfferUnavailableError(BookingRejected):
    code = "OFFER_UNAVAILABLE"

    def __init__(self, subtype: str, week: int):
        super().__init__(
            message=f"The {subtype} offer for week {week} is no longer available.",
            details={"subtype": subtype, "target_week": week},
        )


class InsufficientResourcesError(CareerRejection):
    code = "INSUFFICIENT_RESOURCES"

    def __init__(self, message: str, resource: str, required: float, available: float):
        super().__init__(
            message=message,
            details={"resource": resource, "required": required, "available": available},
        )


class InvalidTrackCountError(CareerRejection):
    code = "INVALID_TRACK_COUNT"

    def __init__(self, project_type: str, minimum: int, maximum: int, received: int):
        super().__init__(
            message=f"{project_type} must have {minimum}-{maximum} tracks.",
            details={"min": minimum, "max": maximum, "received": received},
        )


class DuplicateTitleError(CareerRejection):
    code = "DUPLICATE_TITLE"

    def __init__(self, title: str):
        super().__init__(
            message=f'"{title}" is already taken.',
            details={"title": title},
        )


class EmptyTitleError(CareerRejection):
    code = "EMPTY_TITLE"

    def __init__(self, what: str = "title"):
        super().__init__(message=f"Enter a {what}.")


class UnknownDraftError(CareerRejection):
    code = "UNKNOWN_DRAFT"

    def __init__(self, draft_ids: list[str]):
        super().__init__(
            message="Some selected tracks are no longer available.",
            details={"draft_ids": draft_ids},
        )


class CareerExistsError(CareerRejection):
    code = "CAREER_EXISTS"

    def __init__(self, artist_name: str):
        super().__init__(
            message=f"A career for {artist_name} already exists. Delete the save to start over.",
            details={"artist_name": artist_name},
        )


class CommentLimitError(CareerRejection):
    code = "COMMENT_LIMIT"

    def __init__(self, limit: int):
        super().__init__(
            message=f"You can only comment {limit} times per post each week.",
            details={"limit": limit},
        )


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

async def career_exception_handler(request: Request, exc: CareerException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_dict(),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return structured 422 with machine-readable field errors."""
    field_errors = []
    for error in exc.errors():
        field_errors.append({
            "field": ".".join(str(loc) for loc in error["loc"] if loc != "body"),
            "message": error["msg"],
            "type": error["type"],
        })
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "code": "VALIDATION_ERROR",
            "message": "Request validation failed.",
            "details": {"errors": field_errors},
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )
