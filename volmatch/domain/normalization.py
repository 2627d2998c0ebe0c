from __future__ import annotations

import re
from typing import Iterable


_WS_RE = re.compile(r"\s+")


def normalize_tag(tag: str) -> str:
    return _WS_RE.sub(" ", tag.strip()).lower()


def dedupe_tags(tags: Iterable[str] | None) -> list[str]:
    # keeps the first spelling seen; "Python" and "python " collapse into "Python"
    seen: set[str] = set()
    out: list[str] = []
    for raw in tags or []:
        if not isinstance(raw, str):
            continue
        tag = _WS_RE.sub(" ", raw.strip())
        if not tag:
            continue
        key = tag.lower()
        if key in seen:
            continue
        seen.add(key)
        out.append(tag)
    return out
