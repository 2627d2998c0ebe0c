from __future__ import annotations

from .models import Nonprofit, PosterDetail, PosterSummary, PublicVolunteer, User, Volunteer


def public_volunteer(v: Volunteer) -> PublicVolunteer:
    # email, resume, volunteer form, social links and matching profile stay private
    return PublicVolunteer(
        id=v.id,
        name=v.name,
        username=v.username,
        created_at=v.created_at,
        pronouns=v.pronouns,
        location=v.location,
        school=v.school,
        skills=list(v.skills),
        interests=list(v.interests),
        pitch_video_url=v.pitch_video_url,
        profile_photo=v.profile_photo,
    )


def poster_summary(n: Nonprofit | None) -> PosterSummary | None:
    if n is None:
        return None
    return PosterSummary(id=n.id, name=n.name, username=n.username, organization_logo=n.organization_logo)


def _detail(n: Nonprofit) -> PosterDetail:
    return PosterDetail(
        id=n.id,
        name=n.name,
        username=n.username,
        organization_logo=n.organization_logo,
        organization_description=n.organization_description,
        website=n.website,
    )


def poster_detail(n: Nonprofit | None) -> PosterDetail | None:
    return _detail(n) if n is not None else None


def public_user(u: User) -> PublicVolunteer | PosterDetail:
    if isinstance(u, Volunteer):
        return public_volunteer(u)
    return _detail(u)
