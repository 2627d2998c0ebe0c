from __future__ import annotations

import re
from collections import Counter
from typing import Iterable


STOP_WORDS = frozenset(
    {
        "a", "an", "and", "are", "as", "at", "be", "but", "by", "for",
        "from", "has", "have", "i", "in", "is", "it", "its", "of", "on",
        "or", "our", "so", "that", "the", "their", "they", "this", "to", "was",
        "we", "were", "with", "you", "your",
    }
)

DEFAULT_MAX_KEYWORDS = 20
MIN_TOKEN_LENGTH = 3

_NON_TOKEN_RE = re.compile(r"[^a-z0-9\s-]")
_WS_RE = re.compile(r"\s+")


def _tokens(text: str) -> list[str]:
    t = _NON_TOKEN_RE.sub(" ", text.lower())
    return [w.strip() for w in _WS_RE.split(t)]


def extract_keywords(text: str | None, max_keywords: int = DEFAULT_MAX_KEYWORDS) -> list[str]:
    """Rank significant tokens of ``text`` by frequency.

    Tokens are lower-cased ASCII words (digits and hyphens allowed) of at least
    three characters that are not stop words. Equal frequencies keep the order
    in which the tokens first appear, so the result is deterministic for a
    given input.
    """
    if not text:
        return []
    counts: Counter[str] = Counter()
    for tok in _tokens(text):
        if len(tok) < MIN_TOKEN_LENGTH or tok in STOP_WORDS:
            continue
        counts[tok] += 1
    # Counter keeps insertion order and sorted() is stable
    ranked = sorted(counts.items(), key=lambda kv: -kv[1])
    return [tok for tok, _ in ranked[:max_keywords]]


def opportunity_match_text(
    description: str | None,
    skills_required: Iterable[str] | None,
    category: str | None,
    title: str | None,
) -> str:
    return " ".join(
        [
            description or "",
            " ".join(skills_required or []),
            category or "",
            title or "",
        ]
    )


def opportunity_keywords(
    description: str | None,
    skills_required: Iterable[str] | None,
    category: str | None,
    title: str | None,
    max_keywords: int = DEFAULT_MAX_KEYWORDS,
) -> list[str]:
    return extract_keywords(
        opportunity_match_text(description, skills_required, category, title), max_keywords
    )
