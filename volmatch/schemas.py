from __future__ import annotations

from datetime import date
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from volmatch.domain.normalization import dedupe_tags


class _Payload(BaseModel):
    # the browser client sends camelCase keys
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class RegisterIn(_Payload):
    name: str = Field(min_length=1, max_length=200)
    username: str = Field(min_length=2, max_length=64, pattern=r"^[A-Za-z0-9_.-]+$")
    email: str = Field(max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(min_length=6, max_length=72)
    role: Literal["volunteer", "nonprofit"]
    pronouns: str | None = None
    location: str | None = None
    matching_profile: dict[str, Any] | None = None
    # volunteer
    age: int | None = Field(default=None, ge=0, le=130)
    school: str | None = None
    skills: list[str] = Field(default_factory=list)
    interests: list[str] = Field(default_factory=list)
    # nonprofit
    needed_skills: list[str] = Field(default_factory=list)
    needed_interests: list[str] = Field(default_factory=list)
    organization_description: str | None = None
    website: str | None = None

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("skills", "interests", "needed_skills", "needed_interests")
    @classmethod
    def dedupe(cls, v: list[str]) -> list[str]:
        return dedupe_tags(v)

    def profile_fields(self) -> dict[str, Any]:
        return self.model_dump(exclude={"name", "username", "email", "password", "role"}, exclude_none=True)


class LoginIn(_Payload):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.strip().lower()


class ProfileUpdateIn(_Payload):
    """Editable profile fields; role, email and password are not among them."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    pronouns: str | None = None
    location: str | None = None
    matching_profile: dict[str, Any] | None = None
    age: int | None = Field(default=None, ge=0, le=130)
    school: str | None = None
    skills: list[str] | None = None
    interests: list[str] | None = None
    resume_url: str | None = None
    volunteer_form_url: str | None = None
    pitch_video_url: str | None = None
    profile_photo: str | None = None
    social_links: dict[str, str] | None = None
    needed_skills: list[str] | None = None
    needed_interests: list[str] | None = None
    organization_description: str | None = None
    website: str | None = None
    organization_logo: str | None = None

    @field_validator("skills", "interests", "needed_skills", "needed_interests")
    @classmethod
    def dedupe(cls, v: list[str] | None) -> list[str] | None:
        return dedupe_tags(v) if v is not None else None

    def changes(self) -> dict[str, Any]:
        data = self.model_dump(exclude_unset=True)
        if data.get("name") is None:
            data.pop("name", None)
        return data


class OpportunityIn(_Payload):
    title: str = Field(min_length=1, max_length=300)
    description: str = Field(min_length=1)
    category: str = ""
    location: str = ""
    work_mode: str | None = None
    estimated_hours: float | None = Field(default=None, ge=0)
    deadline: date | None = None
    skills_required: list[str] = Field(default_factory=list)

    @field_validator("title", "description", "category", "location")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()

    @field_validator("skills_required")
    @classmethod
    def dedupe(cls, v: list[str]) -> list[str]:
        return dedupe_tags(v)

    def as_fields(self) -> dict[str, Any]:
        return self.model_dump()


class OpportunityUpdateIn(_Payload):
    title: str | None = Field(default=None, min_length=1, max_length=300)
    description: str | None = Field(default=None, min_length=1)
    category: str | None = None
    location: str | None = None
    work_mode: str | None = None
    estimated_hours: float | None = Field(default=None, ge=0)
    deadline: date | None = None
    skills_required: list[str] | None = None

    @field_validator("title", "description", "category", "location")
    @classmethod
    def strip_text(cls, v: str | None) -> str | None:
        return v.strip() if v is not None else None

    @field_validator("skills_required")
    @classmethod
    def dedupe(cls, v: list[str] | None) -> list[str] | None:
        return dedupe_tags(v) if v is not None else None

    def changes(self) -> dict[str, Any]:
        data = self.model_dump(exclude_unset=True)
        for k in ("title", "description"):
            if data.get(k) is None:
                data.pop(k, None)
        return data
