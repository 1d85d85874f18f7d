"""
fluxforge.page_range
~~~~~~~~~~~~~~~~~~~~
Pure functions for page-selector strings such as "1-3, 5, 8-10".

    parse("1-3,5,8-10")  →  (1, 2, 3, 5, 8, 9, 10)
    parse("5-3")         →  ()      reversed range yields nothing
    parse("")            →  ()

An empty result is ambiguous on purpose: callers decide whether "no string"
means all pages and whether "a string with no pages in it" is an error.
The parser never sees the document, so page numbers past the end are kept.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable

from fluxforge.errors import PageRangeError


# A single "a-b" token may name at most this many pages; a larger span is
# treated as malformed rather than expanded.
MAX_RANGE_PAGES = 10_000


class MalformedTokenPolicy(Enum):
    SKIP   = "skip"     # drop the token, keep parsing
    STRICT = "strict"   # raise PageRangeError


# ── Public API ────────────────────────────────────────────────────────────────

def parse(
    text: str | None,
    policy: MalformedTokenPolicy = MalformedTokenPolicy.SKIP,
) -> tuple[int, ...]:
    """
    Parse *text* into an ascending, deduplicated tuple of 1-based pages.

    A segment with a hyphen must have exactly two positive endpoints
    ("-1-5" and "1-2-3" are malformed). A range whose start is past its
    end, or that spans more than MAX_RANGE_PAGES pages, is malformed too.
    """
    if not text:
        return ()

    pages: set[int] = set()
    for segment in text.split(","):
        token = segment.strip()
        if not token:
            continue
        span = _parse_token(token)
        if span is None:
            if policy is MalformedTokenPolicy.STRICT:
                raise PageRangeError(token)
            continue
        start, end = span
        pages.update(range(start, end + 1))

    return tuple(sorted(pages))


def render(pages: Iterable[int]) -> str:
    """Join *pages* with commas, e.g. (1, 2, 5) → "1,2,5"."""
    return ",".join(str(p) for p in pages)


# ── Internal helpers ──────────────────────────────────────────────────────────

def _parse_token(token: str) -> tuple[int, int] | None:
    """Return the inclusive (start, end) span of *token*, or None if malformed."""
    if "-" not in token:
        page = _positive_int(token)
        return None if page is None else (page, page)

    parts = token.split("-")
    if len(parts) != 2:
        return None
    start, end = _positive_int(parts[0]), _positive_int(parts[1])
    if start is None or end is None or start > end:
        return None
    if end - start + 1 > MAX_RANGE_PAGES:
        return None
    return start, end


def _positive_int(text: str) -> int | None:
    text = text.strip()
    if not (text.isascii() and text.isdigit()):
        return None
    value = int(text)
    return value if value > 0 else None
