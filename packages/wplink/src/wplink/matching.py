"""Match decision engine: ordered first-win tiers over search candidates.

Each tier is a pure function ``(context, candidates, config) -> title | None``.
Tiers are tried in order and the first one returning a title wins; nothing is
re-scored across tiers.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass

import structlog

from wplink.citations import filter_candidates
from wplink.config import LinkConfig
from wplink.names import initials_of
from wplink.similarity import similarity
from wplink.types import MatchDecision, NameParts, SearchResult

log = structlog.get_logger()

_MARKUP_RE = re.compile(r"</?span[^>]*>")
_TOKEN_PUNCT_RE = re.compile(r"""[.,;:!?()\[\]{}'"]""")


@dataclass(frozen=True)
class QueryContext:
    search_term: str
    original_text: str
    name_parts: NameParts | None = None


Tier = Callable[[QueryContext, Sequence[SearchResult], LinkConfig], str | None]


def strip_markup(snippet: str) -> str:
    """Remove the search-match highlight spans from a snippet."""
    return _MARKUP_RE.sub("", snippet)


def snippet_words(snippet: str) -> list[str]:
    return strip_markup(snippet).split()


def clean_token(word: str) -> str:
    return _TOKEN_PUNCT_RE.sub("", word)


def within_gap(positions: list[int], max_gap: int) -> bool:
    """True if sorted consecutive positions are never more than max_gap apart."""
    ordered = sorted(positions)
    return all(b - a <= max_gap for a, b in zip(ordered, ordered[1:]))


def _fuzzy_hits(part: str, words: list[str], config: LinkConfig) -> list[int]:
    min_len = config.proximity.min_fuzzy_token_length
    threshold = config.thresholds.name_fuzzy
    part_lower = part.lower()
    hits: list[int] = []
    for i, word in enumerate(words):
        token = clean_token(word)
        if len(token) < min_len:
            continue
        if similarity(part_lower, token.lower()) >= threshold:
            hits.append(i)
    return hits


def _exact_hits(part: str, words: list[str]) -> list[int]:
    part_lower = part.lower()
    return [i for i, word in enumerate(words) if clean_token(word).lower() == part_lower]


def _all_parts_in_snippet(parts: list[str], snippet: str) -> bool:
    snippet_lower = snippet.lower()
    return all(part.lower() in snippet_lower for part in parts)


def title_contains_part(title: str, parts: list[str]) -> bool:
    title_lower = title.lower()
    return any(part.lower() in title_lower for part in parts)


def title_resembles_part(title: str, parts: list[str], threshold: float) -> bool:
    title_words = title.lower().split()
    return any(
        similarity(part.lower(), word) >= threshold
        for part in parts
        for word in title_words
    )


# --- Name tiers ---------------------------------------------------------------


def title_has_full_name(title: str, names: NameParts) -> bool:
    title_lower = title.lower()
    return (
        names.last_name.lower() in title_lower
        and names.first_and_middle_names.lower() in title_lower
    )


def title_has_initials(title: str, names: NameParts) -> bool:
    """Last name in title and enough title words start with a given-name letter."""
    if names.last_name.lower() not in title.lower():
        return False
    initials = initials_of(names.first_and_middle_names)
    matched = sum(1 for word in title.split() if word[0].upper() in initials)
    return matched >= len(initials)


def match_name_in_titles(
    ctx: QueryContext, candidates: Sequence[SearchResult], config: LinkConfig
) -> str | None:
    """First candidate whose title carries the full name, or the last name plus initials."""
    names = ctx.name_parts
    if names is None:
        return None
    for result in candidates:
        if title_has_full_name(result.title, names) or title_has_initials(result.title, names):
            return result.title
    return None


def _proximity_match(
    ctx: QueryContext,
    candidates: Sequence[SearchResult],
    config: LinkConfig,
    *,
    fuzzy: bool,
) -> str | None:
    if ctx.name_parts is None or not candidates:
        return None
    first = candidates[0]
    parts = ctx.name_parts.parts(config.proximity.min_name_part_length)
    words = snippet_words(first.snippet)

    positions: list[int] = []
    for part in parts:
        hits = _fuzzy_hits(part, words, config) if fuzzy else _exact_hits(part, words)
        if not hits:
            return None
        positions.extend(hits)

    if not within_gap(positions, config.proximity.max_gap):
        log.debug("name_parts_not_in_proximity", text=ctx.original_text, fuzzy=fuzzy)
        return None

    if fuzzy:
        guard = title_resembles_part(first.title, parts, config.thresholds.name_fuzzy)
    else:
        guard = title_contains_part(first.title, parts)
    if not guard:
        log.debug("title_lacks_name_part", text=ctx.original_text, title=first.title)
        return None
    return first.title


def match_name_proximity(
    ctx: QueryContext, candidates: Sequence[SearchResult], config: LinkConfig
) -> str | None:
    return _proximity_match(ctx, candidates, config, fuzzy=False)


def match_name_fuzzy_proximity(
    ctx: QueryContext, candidates: Sequence[SearchResult], config: LinkConfig
) -> str | None:
    """Fuzzy token proximity, tried only when some name part has no exact token."""
    if ctx.name_parts is None or not candidates:
        return None
    parts = ctx.name_parts.parts(config.proximity.min_name_part_length)
    words = snippet_words(candidates[0].snippet)
    if all(_exact_hits(part, words) for part in parts):
        return None
    return _proximity_match(ctx, candidates, config, fuzzy=True)


def match_name_in_snippet(
    ctx: QueryContext, candidates: Sequence[SearchResult], config: LinkConfig
) -> str | None:
    """Every name part appears somewhere in the first snippet."""
    if ctx.name_parts is None or not candidates:
        return None
    first = candidates[0]
    parts = ctx.name_parts.parts(config.proximity.min_name_part_length)
    if not _all_parts_in_snippet(parts, first.snippet):
        return None
    if not title_contains_part(first.title, parts):
        return None
    return first.title


def match_name_fuzzy_snippet(
    ctx: QueryContext, candidates: Sequence[SearchResult], config: LinkConfig
) -> str | None:
    """Fuzzy fallback, tried only when some name part is not a substring of the snippet."""
    if ctx.name_parts is None or not candidates:
        return None
    first = candidates[0]
    parts = ctx.name_parts.parts(config.proximity.min_name_part_length)
    if _all_parts_in_snippet(parts, first.snippet):
        return None
    words = snippet_words(first.snippet)
    if not all(_fuzzy_hits(part, words, config) for part in parts):
        return None
    if not title_resembles_part(first.title, parts, config.thresholds.name_fuzzy):
        return None
    return first.title


# --- Subject tiers ------------------------------------------------------------


def match_subject_exact(
    ctx: QueryContext, candidates: Sequence[SearchResult], config: LinkConfig
) -> str | None:
    term = ctx.search_term.lower()
    for result in candidates:
        if result.title.lower() == term:
            return result.title
    return None


def match_subject_close(
    ctx: QueryContext, candidates: Sequence[SearchResult], config: LinkConfig
) -> str | None:
    term = ctx.search_term.lower()
    for result in candidates:
        if similarity(term, result.title.lower()) >= config.thresholds.subject_close:
            return result.title
    return None


def match_subject_in_title(
    ctx: QueryContext, candidates: Sequence[SearchResult], config: LinkConfig
) -> str | None:
    term = ctx.search_term.lower()
    for result in candidates:
        if term in result.title.lower():
            return result.title
    return None


def match_title_in_subject(
    ctx: QueryContext, candidates: Sequence[SearchResult], config: LinkConfig
) -> str | None:
    term = ctx.search_term.lower()
    for result in candidates:
        if result.title.lower() in term:
            return result.title
    return None


def match_subject_first_result(
    ctx: QueryContext, candidates: Sequence[SearchResult], config: LinkConfig
) -> str | None:
    if not candidates:
        return None
    first = candidates[0]
    score = similarity(ctx.search_term.lower(), first.title.lower())
    if score >= config.thresholds.subject_first_result:
        return first.title
    return None


# --- Exact tier (years, acronyms) ---------------------------------------------


def match_exact_title(
    ctx: QueryContext, candidates: Sequence[SearchResult], config: LinkConfig
) -> str | None:
    for result in candidates:
        if result.title == ctx.search_term:
            return result.title
    return None


NAME_TIERS: tuple[tuple[str, Tier], ...] = (
    ("name_title", match_name_in_titles),
    ("name_proximity", match_name_proximity),
    ("name_fuzzy_proximity", match_name_fuzzy_proximity),
    ("name_snippet", match_name_in_snippet),
    ("name_fuzzy_snippet", match_name_fuzzy_snippet),
)

SUBJECT_TIERS: tuple[tuple[str, Tier], ...] = (
    ("subject_exact", match_subject_exact),
    ("subject_close", match_subject_close),
    ("subject_in_title", match_subject_in_title),
    ("title_in_subject", match_title_in_subject),
    ("subject_first_result", match_subject_first_result),
)

EXACT_TIERS: tuple[tuple[str, Tier], ...] = (("exact_title", match_exact_title),)


def run_tiers(
    tiers: Sequence[tuple[str, Tier]],
    ctx: QueryContext,
    candidates: Sequence[SearchResult],
    config: LinkConfig,
) -> MatchDecision:
    """Evaluate tiers in order; the first one yielding a title wins."""
    if not candidates:
        log.debug("no_candidates", term=ctx.search_term)
        return MatchDecision.reject()
    for tier_name, tier in tiers:
        title = tier(ctx, candidates, config)
        if title is not None:
            log.debug("match_accepted", term=ctx.search_term, tier=tier_name, title=title)
            return MatchDecision.accept(title, tier_name)
    log.debug("no_match", term=ctx.search_term, text=ctx.original_text)
    return MatchDecision.reject()


def decide_name(
    ctx: QueryContext, results: Sequence[SearchResult], config: LinkConfig
) -> MatchDecision:
    return run_tiers(NAME_TIERS, ctx, filter_candidates(list(results)), config)


def decide_subject(
    ctx: QueryContext, results: Sequence[SearchResult], config: LinkConfig
) -> MatchDecision:
    return run_tiers(SUBJECT_TIERS, ctx, filter_candidates(list(results)), config)


def decide_exact(
    ctx: QueryContext, results: Sequence[SearchResult], config: LinkConfig
) -> MatchDecision:
    return run_tiers(EXACT_TIERS, ctx, results, config)
