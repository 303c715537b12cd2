"""Edit distance and normalized string similarity."""

from __future__ import annotations

from rapidfuzz.distance import Levenshtein


def levenshtein_distance(a: str, b: str) -> int:
    """Unit-cost Levenshtein distance. Case-sensitive; callers lower-case."""
    return Levenshtein.distance(a, b)


def similarity(a: str, b: str) -> float:
    """Similarity percentage in [0, 100] derived from the edit distance.

    Two empty strings are identical, so they score 100.
    """
    max_length = max(len(a), len(b))
    if max_length == 0:
        return 100.0
    distance = levenshtein_distance(a, b)
    return (max_length - distance) / max_length * 100
