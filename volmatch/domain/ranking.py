from __future__ import annotations

from typing import Iterable, Mapping

from .errors import AuthorizationError, NotFoundError
from .models import (
    Nonprofit,
    Opportunity,
    RankedOpportunity,
    RankedVolunteer,
    User,
    Volunteer,
)
from .projections import poster_summary, public_volunteer
from .scoring import Scorer, opportunity_score, overlap_score, volunteer_score


def rank_opportunities(
    volunteer: User,
    opportunities: Iterable[Opportunity],
    posters: Mapping[int, Nonprofit],
    score: Scorer = overlap_score,
) -> list[RankedOpportunity]:
    """Open opportunities ordered by how well they fit ``volunteer``.

    ``posters`` maps nonprofit id to its record; opportunities whose poster is
    missing are still ranked, with ``poster`` left empty.
    """
    if not isinstance(volunteer, Volunteer):
        raise AuthorizationError("Only volunteers can access recommended opportunities")

    ranked: list[RankedOpportunity] = []
    for o in opportunities:
        if o.status != "open":
            continue
        poster = posters.get(o.nonprofit_id) if o.nonprofit_id is not None else None
        ranked.append(
            RankedOpportunity(
                opportunity=o,
                match_score=opportunity_score(o, volunteer, score),
                poster=poster_summary(poster),
            )
        )

    # Sort by score desc; tie-breakers: newer first, then higher id
    ranked.sort(
        key=lambda r: (r.match_score, r.opportunity.created_at, r.opportunity.id),
        reverse=True,
    )
    return ranked


def rank_volunteers(
    opportunity: Opportunity | None,
    requester: User,
    users: Iterable[User],
    score: Scorer = overlap_score,
) -> list[RankedVolunteer]:
    """Volunteers ordered by skill overlap with ``opportunity``.

    Only the nonprofit that posted the opportunity may ask. Equal scores keep
    the earliest registered volunteer first.
    """
    if not isinstance(requester, Nonprofit):
        raise AuthorizationError("Only nonprofits can access recommended volunteers")
    if opportunity is None:
        raise NotFoundError("Opportunity not found")
    if opportunity.nonprofit_id != requester.id:
        raise AuthorizationError("Not authorized to view volunteers for this opportunity")

    scored = [
        (u, volunteer_score(u, opportunity, score))
        for u in users
        if isinstance(u, Volunteer)
    ]
    scored.sort(key=lambda x: (-x[1], x[0].created_at, x[0].id))
    return [RankedVolunteer(volunteer=public_volunteer(v), match_score=s) for v, s in scored]
