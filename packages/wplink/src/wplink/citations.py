"""Filtering of citation-like search candidates."""

from __future__ import annotations

import re

from wplink.types import SearchResult

CITATION_MARKERS: tuple[str, ...] = (
    "{{cite",
    "ISBN",
    "Retrieved",
    "pp.",
    "p.",
    "vol.",
    "edition",
    "publisher",
)

CITATION_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r'\}\}\s*<span class="searchmatch">'),
    re.compile(r'<span class="searchmatch">.*?\}\}'),
    re.compile(r"\d{4}\)\."),  # year followed by ").", as in a reference list
)


def is_citation_like(result: SearchResult) -> bool:
    """Check if a result's snippet looks like a citation or reference entry."""
    snippet = result.snippet
    if not snippet:
        return False
    if any(marker in snippet for marker in CITATION_MARKERS):
        return True
    return any(pattern.search(snippet) for pattern in CITATION_PATTERNS)


def filter_candidates(results: list[SearchResult]) -> list[SearchResult]:
    """Drop citation-like results, unless that would drop all of them."""
    filtered = [r for r in results if not is_citation_like(r)]
    return filtered if filtered else list(results)
