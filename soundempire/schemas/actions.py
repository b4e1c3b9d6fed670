"""
Action request / response schemas.

POST /career/profile                 → ProfileCreateRequest  → ActionResponse
POST /career/advance                 →                         AdvanceResponse
POST /studio/drafts                  → DraftCreateRequest    → ActionResponse
POST /studio/projects                → ProjectCreateRequest  → ActionResponse
PUT  /studio/projects/{id}           → ProjectUpdateRequest  → ActionResponse
POST /schedule/bookings              → BookingRequest        → ActionResponse
POST /social/posts                   → PostCreateRequest     → ActionResponse
POST /social/posts/{id}/comments     → CommentCreateRequest  → ActionResponse
GET  /career/history                 →                         WeekSnapshotList
"""
from __future__ import annotations

import json
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from soundempire.schemas.career import (
    Alert,
    CareerState,
    Difficulty,
    EngagementCategory,
    Offer,
    Profile,
    ProjectType,
    WEEKS_PER_YEAR,
)


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class ProfileCreateRequest(BaseModel):
    """Start a new career. A blank artist name is rejected with an alert."""
    artist_name: str = Field(examples=["Nova Reyes"])
    first_name: str = ""
    last_name: str = ""
    age: Optional[int] = Field(default=None, ge=0, le=120)
    start_year: int = Field(default=2025, ge=1900, le=3000)
    gender: str = ""
    difficulty: Difficulty = Difficulty.normal

    def to_profile(self) -> Profile:
        return Profile(**self.model_dump())


class DraftCreateRequest(BaseModel):
    title: Optional[str] = Field(
        default=None,
        description='Blank or omitted gives "Untitled N".',
        examples=["Midnight Static"],
    )


class ProjectCreateRequest(BaseModel):
    title: str = ""
    project_type: ProjectType
    track_ids: list[str] = Field(
        default_factory=list,
        description="Draft ids in track order. Track count is checked at release.",
    )


class ProjectUpdateRequest(BaseModel):
    """Only the fields sent are changed."""
    title: Optional[str] = None
    project_type: Optional[ProjectType] = None
    track_ids: Optional[list[str]] = None


class BookingRequest(BaseModel):
    """Identifies an offer from the current pool by subtype + week + energy cost."""
    category: EngagementCategory
    subtype: str = Field(examples=["club"])
    target_week: int = Field(ge=1, le=WEEKS_PER_YEAR)
    energy_cost: int = Field(ge=0)

    def to_offer(self) -> Offer:
        return Offer(**self.model_dump())


class PostCreateRequest(BaseModel):
    text: str = Field(examples=["New single out Friday!"])
    pinned: bool = False


class CommentCreateRequest(BaseModel):
    text: str


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class RejectionOut(BaseModel):
    code: str
    message: str
    details: Optional[dict[str, Any]] = None


class ActionResponse(BaseModel):
    """Result of one player action: the new state plus what it announced."""
    state: CareerState
    alerts: list[Alert] = Field(
        default_factory=list,
        description="Alerts added by this action, most recent first.",
    )
    rejection: Optional[RejectionOut] = Field(
        default=None,
        description="Present when the action was rejected; the state is then unchanged apart from its alert.",
    )

    @classmethod
    def from_result(cls, result, **extra) -> "ActionResponse":
        rejection = None
        if result.rejection is not None:
            rejection = RejectionOut(**result.rejection.to_dict())
        return cls(state=result.state, alerts=result.alerts, rejection=rejection, **extra)


class WeekReportOut(BaseModel):
    week: int
    year: int
    total_streams: int
    streaming_payout: float
    engagement_money: int
    units_sold: int
    popularity_change: int
    reputation_change: int
    followers_gained: int
    completed: int
    postponed: int
    summary: list[str]

    @classmethod
    def from_report(cls, report) -> "WeekReportOut":
        return cls(
            week=report.processed.week,
            year=report.processed.year,
            total_streams=report.total_streams,
            streaming_payout=round(report.streaming_payout, 2),
            engagement_money=report.engagement_money,
            units_sold=report.units_sold,
            popularity_change=report.popularity_after - report.popularity_before,
            reputation_change=report.reputation_after - report.reputation_before,
            followers_gained=report.followers_gained,
            completed=len(report.completed),
            postponed=len(report.deferred),
            summary=report.summary,
        )


class AdvanceResponse(ActionResponse):
    report: WeekReportOut


class WeekSnapshotResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    year: int
    week: int
    total_streams: int
    units_sold: int
    money: float
    summary: list[str] = Field(default_factory=list)
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row) -> "WeekSnapshotResponse":
        return cls(
            id=row.id,
            year=row.year,
            week=row.week,
            total_streams=row.total_streams,
            units_sold=row.units_sold,
            money=float(row.money),
            summary=json.loads(row.summary) if row.summary else [],
            created_at=row.created_at.isoformat() if row.created_at else None,
        )


class WeekSnapshotList(BaseModel):
    items: list[WeekSnapshotResponse]
    total: int
    limit: int
    offset: int
