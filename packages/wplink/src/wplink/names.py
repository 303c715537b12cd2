"""Personal name handling for "Last, First Middle" catalog headings."""

from __future__ import annotations

import re

from wplink.types import NameParts

_DIGIT_RE = re.compile(r"[0-9]")


def has_single_comma(text: str) -> bool:
    return text.count(",") == 1


def looks_like_person_name(text: str) -> bool:
    """Heuristic for inverted personal names: exactly one comma and no digits."""
    return has_single_comma(text) and not _DIGIT_RE.search(text)


def normalize_name(text: str) -> NameParts:
    """Split an inverted name into last name and given names.

    Everything before the first comma is the last name; the rest (trimmed)
    is the given names, possibly empty.
    """
    last, _, rest = text.partition(",")
    return NameParts(last_name=last.strip(), first_and_middle_names=rest.strip())


def initials_of(first_and_middle_names: str) -> list[str]:
    """Upper-cased letters of the given names with spaces, dots and commas removed."""
    return [c.upper() for c in re.sub(r"[\s.,]", "", first_and_middle_names)]
