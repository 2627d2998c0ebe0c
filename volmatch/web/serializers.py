from __future__ import annotations

from datetime import date, datetime
from typing import Any

from volmatch.domain.models import (
    Application,
    ApplicationView,
    Nonprofit,
    Opportunity,
    PosterDetail,
    PosterSummary,
    PublicVolunteer,
    RankedOpportunity,
    RankedVolunteer,
    User,
    Volunteer,
)


def _iso(v: date | datetime | None) -> str | None:
    return v.isoformat() if v else None


def poster_json(p: PosterSummary | None) -> dict[str, Any] | None:
    if p is None:
        return None
    out: dict[str, Any] = {
        "id": p.id,
        "name": p.name,
        "username": p.username,
        "organizationLogo": p.organization_logo,
    }
    if isinstance(p, PosterDetail):
        out["organizationDescription"] = p.organization_description
        out["website"] = p.website
    return out


def opportunity_json(o: Opportunity, poster: PosterSummary | None = None) -> dict[str, Any]:
    return {
        "id": o.id,
        "title": o.title,
        "description": o.description,
        "category": o.category,
        "location": o.location,
        "workMode": o.work_mode,
        "estimatedHours": o.estimated_hours,
        "deadline": _iso(o.deadline),
        "status": o.status,
        "skillsRequired": list(o.skills_required),
        "keywords": list(o.keywords),
        "nonprofitId": o.nonprofit_id,
        "nonprofit": poster_json(poster),
        "createdAt": _iso(o.created_at),
        "updatedAt": _iso(o.updated_at),
    }


def ranked_opportunity_json(r: RankedOpportunity) -> dict[str, Any]:
    out = opportunity_json(r.opportunity, r.poster)
    out["matchScore"] = r.match_score
    return out


def public_volunteer_json(v: PublicVolunteer) -> dict[str, Any]:
    return {
        "id": v.id,
        "role": "volunteer",
        "name": v.name,
        "username": v.username,
        "pronouns": v.pronouns,
        "location": v.location,
        "school": v.school,
        "skills": list(v.skills),
        "interests": list(v.interests),
        "pitchVideoUrl": v.pitch_video_url,
        "profilePhoto": v.profile_photo,
        "createdAt": _iso(v.created_at),
    }


def ranked_volunteer_json(r: RankedVolunteer) -> dict[str, Any]:
    out = public_volunteer_json(r.volunteer)
    out["matchScore"] = r.match_score
    return out


def public_user_json(p: PublicVolunteer | PosterDetail) -> dict[str, Any]:
    if isinstance(p, PublicVolunteer):
        return public_volunteer_json(p)
    out = poster_json(p) or {}
    out["role"] = "nonprofit"
    return out


def user_json(u: User) -> dict[str, Any]:
    """The account owner's own view; everything except credentials."""
    out: dict[str, Any] = {
        "id": u.id,
        "role": u.role,
        "name": u.name,
        "username": u.username,
        "email": u.email,
        "pronouns": u.pronouns,
        "location": u.location,
        "emailVerified": u.email_verified,
        "matchingProfile": dict(u.matching_profile),
        "createdAt": _iso(u.created_at),
    }
    if isinstance(u, Volunteer):
        out.update(
            {
                "age": u.age,
                "school": u.school,
                "skills": list(u.skills),
                "interests": list(u.interests),
                "resume": u.resume_url,
                "volunteerForm": u.volunteer_form_url,
                "pitchVideoUrl": u.pitch_video_url,
                "profilePhoto": u.profile_photo,
                "socialLinks": dict(u.social_links),
            }
        )
    elif isinstance(u, Nonprofit):
        out.update(
            {
                "neededSkills": list(u.needed_skills),
                "neededInterests": list(u.needed_interests),
                "organizationDescription": u.organization_description,
                "website": u.website,
                "organizationLogo": u.organization_logo,
            }
        )
    return out


def application_json(a: Application) -> dict[str, Any]:
    return {
        "id": a.id,
        "opportunityId": a.opportunity_id,
        "volunteerId": a.volunteer_id,
        "status": a.status,
        "createdAt": _iso(a.created_at),
        "reviewedAt": _iso(a.reviewed_at),
    }


def application_view_json(v: ApplicationView) -> dict[str, Any]:
    out = application_json(v.application)
    out["opportunityTitle"] = v.opportunity_title
    if v.volunteer is not None:
        # the poster sees the applicant's contact details, not their documents
        vol = v.volunteer
        out["volunteer"] = {
            "id": vol.id,
            "name": vol.name,
            "email": vol.email,
            "school": vol.school,
            "skills": list(vol.skills),
            "interests": list(vol.interests),
            "profilePhoto": vol.profile_photo,
            "pitchVideoUrl": vol.pitch_video_url,
        }
    return out
