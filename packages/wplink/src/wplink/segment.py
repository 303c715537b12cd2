"""Segmentation of catalog field text into classified components.

A subject heading such as ``"Napoleon I, Emperor (1769-1821) -- Family"`` is
split on ``" -- "`` and each piece is classified. A trailing parenthetical is
split off and classified as a date range or an acronym; the main text is
either an inverted personal name or a plain subject. Every component keeps
its character span in the field text so decisions can be mapped back onto
the original string.
"""

from __future__ import annotations

import re

import structlog

from wplink.names import has_single_comma, looks_like_person_name, normalize_name
from wplink.types import Component, FieldText

log = structlog.get_logger()

SUBJECT_SEPARATOR_RE = re.compile(r"\s+--\s+")
_TRAILING_PARENTHETICAL_RE = re.compile(r"^(.*?)\s*\(([^)]+)\)$")
_ANY_PARENTHETICAL_RE = re.compile(r"\(([^)]+)\)")
_DATE_RANGE_RE = re.compile(r"^[0-9\s\-–—.,/]+$")
_YEAR_RE = re.compile(r"\b[0-9]{4}\b")


def _strip_span(text: str, start: int, end: int) -> tuple[int, int]:
    """Narrow [start, end) of text to exclude surrounding whitespace."""
    while start < end and text[start].isspace():
        start += 1
    while end > start and text[end - 1].isspace():
        end -= 1
    return start, end


def split_subject(text: str) -> tuple[list[str], list[str]]:
    """Split a subject heading into raw pieces and the separators between them.

    Interleaving pieces and separators reproduces the input exactly.
    """
    pieces: list[str] = []
    separators: list[str] = []
    cursor = 0
    for m in SUBJECT_SEPARATOR_RE.finditer(text):
        pieces.append(text[cursor:m.start()])
        separators.append(m.group(0))
        cursor = m.end()
    pieces.append(text[cursor:])
    return pieces, separators


def extract_years(text: str) -> list[str]:
    return _YEAR_RE.findall(text)


def locate_years(text: str) -> list[tuple[str, int]]:
    """Pair each extracted year with its offset in text.

    Scans left to right with a cursor so a repeated year is matched at a
    fresh occurrence each time. Years that cannot be located are skipped.
    """
    located: list[tuple[str, int]] = []
    cursor = 0
    for year in extract_years(text):
        pos = text.find(year, cursor)
        if pos < 0:
            continue
        located.append((year, pos))
        cursor = pos + len(year)
    return located


def is_date_range(text: str) -> bool:
    return bool(_DATE_RANGE_RE.match(text))


def person_component(text: str, start: int, component_id: str) -> Component:
    return Component(
        id=component_id,
        text=text,
        role="PersonName",
        start=start,
        end=start + len(text),
        name_parts=normalize_name(text),
    )


def parenthetical_component(text: str, start: int, component_id: str) -> Component:
    end = start + len(text)
    if not is_date_range(text):
        return Component(id=component_id, text=text, role="Acronym", start=start, end=end)

    years = locate_years(text)
    if not years:
        return Component(id=component_id, text=text, role="PlainSubject", start=start, end=end)

    children = [
        Component(
            id=f"{component_id}.{k}",
            text=year,
            role="Year",
            start=start + pos,
            end=start + pos + len(year),
        )
        for k, (year, pos) in enumerate(years)
    ]
    return Component(
        id=component_id, text=text, role="DateRange", start=start, end=end, children=children
    )


def subject_component(
    text: str, start: int, component_id: str, *, second_pass: bool = False
) -> Component:
    """Plain subject text, with one retry for a parenthetical missed earlier."""
    if not second_pass and _ANY_PARENTHETICAL_RE.search(text):
        log.debug("parenthetical_second_pass", text=text)
        return classify_component(text, start, component_id, second_pass=True)
    return Component(
        id=component_id, text=text, role="PlainSubject", start=start, end=start + len(text)
    )


def classify_component(
    text: str, start: int, component_id: str, *, second_pass: bool = False
) -> Component:
    """Classify one subject piece. ``start`` is its offset in the field text."""
    m = _TRAILING_PARENTHETICAL_RE.match(text)
    if m:
        main_s, main_e = _strip_span(text, m.start(1), m.end(1))
        paren_s, paren_e = _strip_span(text, m.start(2), m.end(2))
        main_text = text[main_s:main_e]
        main_id = f"{component_id}.0"
        if looks_like_person_name(main_text):
            main = person_component(main_text, start + main_s, main_id)
        else:
            main = subject_component(
                main_text, start + main_s, main_id, second_pass=second_pass
            )
        parenthetical = parenthetical_component(
            text[paren_s:paren_e], start + paren_s, f"{component_id}.1"
        )
        return Component(
            id=component_id,
            text=text,
            role="Compound",
            start=start,
            end=start + len(text),
            children=[main, parenthetical],
        )

    if looks_like_person_name(text):
        return person_component(text, start, component_id)
    return subject_component(text, start, component_id, second_pass=second_pass)


def segment_subject(field: FieldText) -> tuple[list[Component], list[str]]:
    pieces, separators = split_subject(field.text)
    components: list[Component] = []
    offset = 0
    for i, piece in enumerate(pieces):
        s, e = _strip_span(piece, 0, len(piece))
        components.append(classify_component(piece[s:e], offset + s, f"{field.id}.{i}"))
        offset += len(piece)
        if i < len(separators):
            offset += len(separators[i])
    return components, separators


def segment_field(field: FieldText) -> tuple[list[Component], list[str]]:
    """Segment a field into top-level components and subject separators.

    Name fields with exactly one comma become a single person name; anything
    else is handled as a subject heading.
    """
    if field.kind == "name" and has_single_comma(field.text):
        s, e = _strip_span(field.text, 0, len(field.text))
        return [person_component(field.text[s:e], s, f"{field.id}.0")], []
    return segment_subject(field)
