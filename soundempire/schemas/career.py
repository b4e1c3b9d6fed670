"""
Entity Store: the canonical in-memory career document.

Pure data, no behavior beyond small derived properties. Services receive a
CareerState, work on a deep copy, and hand back the new value.

The catalog is a discriminated union on `kind`:
  Single   one released song
  Project  an EP (3-7 tracks) or ALBUM (8-14 tracks) with per-track history
"""
from __future__ import annotations

import enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field

SCHEMA_VERSION = 3

WEEKS_PER_YEAR = 52
STAT_MIN = 1
STAT_MAX = 100
ENERGY_MAX = 100
INSPIRATION_MAX = 100


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Difficulty(str, enum.Enum):
    easy = "Easy"
    normal = "Normal"
    hard = "Hard"


class ProjectType(str, enum.Enum):
    ep = "EP"
    album = "ALBUM"


class Certification(str, enum.Enum):
    none = "none"
    gold = "gold"
    platinum = "platinum"
    diamond = "diamond"

    @property
    def rank(self) -> int:
        return list(Certification).index(self)


class EngagementCategory(str, enum.Enum):
    gig = "gig"
    interview = "interview"


class AlertKind(str, enum.Enum):
    info = "info"
    success = "success"
    warning = "warning"


class AccountCategory(str, enum.Enum):
    player = "player"
    official_chart = "official_chart"
    official_stats = "official_stats"
    industry = "industry"
    trending = "trending"
    npc = "npc"


# ---------------------------------------------------------------------------
# Profile, clock, stats
# ---------------------------------------------------------------------------

class Profile(BaseModel):
    artist_name: str
    first_name: str = ""
    last_name: str = ""
    age: Optional[int] = None
    start_year: int = 2025
    gender: str = ""
    difficulty: Difficulty = Difficulty.normal


class CareerClock(BaseModel):
    week: int = Field(default=1, ge=1, le=WEEKS_PER_YEAR)
    year: int = 2025

    @property
    def index(self) -> int:
        """Absolute week number, used for age and expiry arithmetic."""
        return self.year * WEEKS_PER_YEAR + (self.week - 1)

    def advanced(self) -> CareerClock:
        week, year = self.week + 1, self.year
        if week > WEEKS_PER_YEAR:
            week, year = 1, year + 1
        return CareerClock(week=week, year=year)

    def label(self) -> str:
        return f"Week {self.week}, {self.year}"


class Stats(BaseModel):
    popularity: int = Field(default=1, ge=STAT_MIN, le=STAT_MAX)
    reputation: int = Field(default=50, ge=STAT_MIN, le=STAT_MAX)
    energy: int = Field(default=ENERGY_MAX, ge=0, le=ENERGY_MAX)
    inspiration: int = Field(default=INSPIRATION_MAX, ge=0, le=INSPIRATION_MAX)
    money: float = Field(default=1000.0, allow_inf_nan=False)


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

class DraftTrack(BaseModel):
    id: str
    title: str
    quality: int = Field(ge=30, le=100)
    # Derived: ids of unreleased project plans listing this draft.
    project_ids: list[str] = Field(default_factory=list)


class ReleasedWorkBase(BaseModel):
    id: str
    title: str
    quality: int
    week_released: int
    year_released: int
    weeks_on: int = 0
    peak_pos: Optional[int] = None
    last_week_pos: Optional[int] = None
    streams_history: list[int] = Field(default_factory=list)
    sales_history: list[int] = Field(default_factory=list)
    sales_lifetime: int = 0
    first_week_sales: Optional[int] = None
    certification: Certification = Certification.none

    @property
    def current_streams(self) -> int:
        return self.streams_history[-1] if self.streams_history else 0

    @property
    def previous_streams(self) -> int:
        return self.streams_history[-2] if len(self.streams_history) > 1 else 0

    @property
    def current_sales(self) -> int:
        return self.sales_history[-1] if self.sales_history else 0


class Single(ReleasedWorkBase):
    kind: Literal["single"] = "single"


class ProjectTrack(BaseModel):
    id: str
    title: str
    quality: int
    streams_history: list[int] = Field(default_factory=list)


class Project(ReleasedWorkBase):
    kind: Literal["project"] = "project"
    project_type: ProjectType
    tracks: list[ProjectTrack] = Field(default_factory=list)


ReleasedWork = Annotated[Union[Single, Project], Field(discriminator="kind")]


class ProjectPlan(BaseModel):
    """An EP/album being assembled from drafts, not yet released."""
    id: str
    title: str
    project_type: ProjectType
    track_ids: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Engagements
# ---------------------------------------------------------------------------

class Offer(BaseModel):
    category: EngagementCategory
    subtype: str
    target_week: int = Field(ge=1, le=WEEKS_PER_YEAR)
    energy_cost: int = Field(ge=0)
    money_reward: int = 0
    popularity_delta: int = 0
    reputation_delta: int = 0
    sold_out: bool = False


class ScheduledEngagement(Offer):
    id: str


class OfferPool(BaseModel):
    gigs: list[Offer] = Field(default_factory=list)
    interviews: list[Offer] = Field(default_factory=list)

    def for_category(self, category: EngagementCategory) -> list[Offer]:
        return self.gigs if category == EngagementCategory.gig else self.interviews

    def is_empty(self) -> bool:
        return not self.gigs and not self.interviews


# ---------------------------------------------------------------------------
# Alerts
# ---------------------------------------------------------------------------

class Alert(BaseModel):
    id: str
    kind: AlertKind = AlertKind.info
    message: str
    week: int
    year: int


# ---------------------------------------------------------------------------
# Social
# ---------------------------------------------------------------------------

class SocialAccount(BaseModel):
    handle: str
    display_name: str
    category: AccountCategory
    followers: int = 0
    verified: bool = False


class Comment(BaseModel):
    id: str
    author: str
    text: str
    week_index: int


class Post(BaseModel):
    id: str
    author: str
    category: AccountCategory
    text: str
    week_index: int
    views: int = 0
    likes: int = 0
    comments: list[Comment] = Field(default_factory=list)
    pinned: bool = False
    liked_by_player: bool = False
    # None: never expires.
    expires_index: Optional[int] = None
    player_comments_this_week: int = 0


class SocialState(BaseModel):
    accounts: list[SocialAccount] = Field(default_factory=list)
    posts: list[Post] = Field(default_factory=list)
    feed: list[Post] = Field(default_factory=list)

    def account(self, handle: str) -> Optional[SocialAccount]:
        return next((a for a in self.accounts if a.handle == handle), None)

    @property
    def player(self) -> Optional[SocialAccount]:
        return next(
            (a for a in self.accounts if a.category == AccountCategory.player), None
        )


# ---------------------------------------------------------------------------
# Root document
# ---------------------------------------------------------------------------

class CareerState(BaseModel):
    schema_version: int = SCHEMA_VERSION
    profile: Optional[Profile] = None
    clock: CareerClock = Field(default_factory=CareerClock)
    stats: Stats = Field(default_factory=Stats)
    drafts: list[DraftTrack] = Field(default_factory=list)
    catalog: list[ReleasedWork] = Field(default_factory=list)
    projects: list[ProjectPlan] = Field(default_factory=list)
    schedule: list[ScheduledEngagement] = Field(default_factory=list)
    offers: OfferPool = Field(default_factory=OfferPool)
    alerts: list[Alert] = Field(default_factory=list)
    week_summary: list[str] = Field(default_factory=list)
    social: SocialState = Field(default_factory=SocialState)

    def work(self, work_id: str) -> Optional[Union[Single, Project]]:
        return next((w for w in self.catalog if w.id == work_id), None)

    def draft(self, draft_id: str) -> Optional[DraftTrack]:
        return next((d for d in self.drafts if d.id == draft_id), None)

    def plan(self, plan_id: str) -> Optional[ProjectPlan]:
        return next((p for p in self.projects if p.id == plan_id), None)

    def scheduled_count(self, category: EngagementCategory) -> int:
        return sum(1 for e in self.schedule if e.category == category)
