from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, ClassVar, Literal, Union


Role = Literal["volunteer", "nonprofit"]
OpportunityStatus = Literal["open", "closed"]
ApplicationStatus = Literal["applied", "accepted", "rejected"]

ROLES: tuple[Role, ...] = ("volunteer", "nonprofit")
OPPORTUNITY_STATUSES: tuple[OpportunityStatus, ...] = ("open", "closed")


@dataclass
class Volunteer:
    role: ClassVar[Role] = "volunteer"

    id: int
    name: str
    username: str
    email: str
    created_at: datetime
    pronouns: str | None = None
    location: str = ""
    age: int | None = None
    school: str = ""
    skills: list[str] = field(default_factory=list)
    interests: list[str] = field(default_factory=list)
    resume_url: str = ""
    volunteer_form_url: str = ""
    pitch_video_url: str = ""
    profile_photo: str = ""
    social_links: dict[str, str] = field(default_factory=dict)
    matching_profile: dict[str, Any] = field(default_factory=dict)
    email_verified: bool = False


@dataclass
class Nonprofit:
    role: ClassVar[Role] = "nonprofit"

    id: int
    name: str
    username: str
    email: str
    created_at: datetime
    pronouns: str | None = None
    location: str = ""
    needed_skills: list[str] = field(default_factory=list)
    needed_interests: list[str] = field(default_factory=list)
    organization_description: str = ""
    website: str = ""
    organization_logo: str = ""
    matching_profile: dict[str, Any] = field(default_factory=dict)
    email_verified: bool = False


User = Union[Volunteer, Nonprofit]


@dataclass
class Opportunity:
    id: int
    nonprofit_id: int | None
    title: str
    description: str
    created_at: datetime
    category: str = ""
    location: str = ""
    work_mode: str | None = None
    estimated_hours: float | None = None
    deadline: date | None = None
    status: OpportunityStatus = "open"
    skills_required: list[str] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)
    updated_at: datetime | None = None


@dataclass
class Application:
    id: int
    volunteer_id: int
    opportunity_id: int
    status: ApplicationStatus
    created_at: datetime
    reviewed_at: datetime | None = None


@dataclass(frozen=True)
class PosterSummary:
    id: int
    name: str
    username: str
    organization_logo: str = ""


@dataclass(frozen=True)
class PosterDetail(PosterSummary):
    organization_description: str = ""
    website: str = ""


@dataclass
class PublicVolunteer:
    """Volunteer fields that are safe to show to any other account."""

    id: int
    name: str
    username: str
    created_at: datetime
    pronouns: str | None = None
    location: str = ""
    school: str = ""
    skills: list[str] = field(default_factory=list)
    interests: list[str] = field(default_factory=list)
    pitch_video_url: str = ""
    profile_photo: str = ""


@dataclass
class RankedOpportunity:
    opportunity: Opportunity
    match_score: int
    poster: PosterSummary | None = None


@dataclass
class RankedVolunteer:
    volunteer: PublicVolunteer
    match_score: int


@dataclass
class OpportunityView:
    opportunity: Opportunity
    poster: PosterSummary | None = None


@dataclass
class ApplicationView:
    application: Application
    opportunity_title: str = ""
    volunteer: Volunteer | None = None
