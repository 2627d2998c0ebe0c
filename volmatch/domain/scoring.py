from __future__ import annotations

from typing import Iterable, Protocol

from volmatch.config import Matching
from .models import Opportunity, Volunteer
from .normalization import normalize_tag


class Scorer(Protocol):
    def __call__(self, a: Iterable[str] | None, b: Iterable[str] | None) -> int: ...


def overlap_score(a: Iterable[str] | None, b: Iterable[str] | None) -> int:
    """Size of the intersection of two tag collections, compared as typed."""
    return len(set(a or ()) & set(b or ()))


def normalized_overlap_score(a: Iterable[str] | None, b: Iterable[str] | None) -> int:
    """Like overlap_score, but "Python " and "python" count as the same tag."""
    sa = {normalize_tag(t) for t in a or ()}
    sb = {normalize_tag(t) for t in b or ()}
    sa.discard("")
    return len(sa & sb)


def scorer_for(matching: Matching) -> Scorer:
    return normalized_overlap_score if matching.normalize_case else overlap_score


def opportunity_score(
    opportunity: Opportunity, volunteer: Volunteer, score: Scorer = overlap_score
) -> int:
    # skill overlap and interest/keyword overlap count equally
    skills = score(opportunity.skills_required, volunteer.skills)
    interests = score(opportunity.keywords, volunteer.interests)
    return skills + interests


def volunteer_score(
    volunteer: Volunteer, opportunity: Opportunity, score: Scorer = overlap_score
) -> int:
    return score(volunteer.skills, opportunity.skills_required)
