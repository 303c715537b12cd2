"""Main orchestration: segmentation, lookups, decisions, annotation."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from dataclasses import dataclass, field

import structlog

from wplink.annotations import AnnotationSink
from wplink.config import LinkConfig
from wplink.matching import QueryContext, decide_exact, decide_name, decide_subject
from wplink.oracle import OracleAdapter, SearchOracle, WikipediaSearchOracle
from wplink.segment import segment_field
from wplink.types import Annotation, Component, FieldResult, FieldText, MatchDecision

log = structlog.get_logger()


@dataclass
class LinkerStats:
    """Statistics collected during linking."""

    fields: int = 0
    components: int = 0
    oracle_queries: int = 0
    oracle_failures: int = 0
    accepted: int = 0
    rejected: int = 0
    tiers: dict[str, int] = field(default_factory=dict)


class Linker:
    """Links catalog field texts to reference article titles."""

    def __init__(
        self,
        config: LinkConfig | None = None,
        oracle: SearchOracle | None = None,
        sink: AnnotationSink | None = None,
    ) -> None:
        self.config = config or LinkConfig()
        self.oracle = oracle or WikipediaSearchOracle(self.config.oracle)
        self.adapter = OracleAdapter(self.oracle, self.config.oracle)
        self.sink = sink or AnnotationSink()
        self.stats = LinkerStats()

    async def __aenter__(self) -> Linker:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        close = getattr(self.oracle, "aclose", None)
        if close is not None:
            await close()

    async def decide(self, component: Component) -> MatchDecision:
        """Query the oracle for one searchable component and decide on a title."""
        query = component.query.strip()
        if not query:
            return MatchDecision.reject()

        results = await self.adapter.query(query)
        ctx = QueryContext(
            search_term=query,
            original_text=component.text,
            name_parts=component.name_parts,
        )
        if component.role == "PersonName":
            return decide_name(ctx, results, self.config)
        if component.role in ("Acronym", "Year"):
            return decide_exact(ctx, results, self.config)
        return decide_subject(ctx, results, self.config)

    async def _resolve(
        self, field_id: str, component: Component, sink: AnnotationSink
    ) -> tuple[MatchDecision, Annotation | None]:
        decision = await self.decide(component)
        self._record(decision)
        return decision, sink.emit(field_id, component, decision)

    def _record(self, decision: MatchDecision) -> None:
        self.stats.components += 1
        if decision.accepted:
            self.stats.accepted += 1
            tier = decision.tier or "unknown"
            self.stats.tiers[tier] = self.stats.tiers.get(tier, 0) + 1
        else:
            self.stats.rejected += 1

    async def link_field(
        self, field_text: FieldText, sink: AnnotationSink | None = None
    ) -> FieldResult:
        """Segment a field and resolve all its components concurrently.

        Annotations go to ``sink`` when given, otherwise to the linker's own sink.
        """
        sink = sink if sink is not None else self.sink
        components, separators = segment_field(field_text)
        result = FieldResult(field=field_text, components=components, separators=separators)
        leaves = result.leaves()
        log.debug(
            "link_field_start",
            field_id=field_text.id,
            kind=field_text.kind,
            text=field_text.text,
            components=[(c.role, c.text) for c in leaves],
        )

        outcomes = await asyncio.gather(
            *(self._resolve(field_text.id, leaf, sink) for leaf in leaves)
        )
        result.decisions = {leaf.id: d for leaf, (d, _) in zip(leaves, outcomes)}
        result.annotations = sorted(
            (a for _, a in outcomes if a is not None), key=lambda a: a.start
        )
        self.stats.fields += 1
        self._sync_oracle_stats()

        log.debug(
            "link_field_done",
            field_id=field_text.id,
            accepted=len(result.annotations),
            total=len(outcomes),
        )
        return result

    async def link_all(
        self, fields: Iterable[FieldText], sink: AnnotationSink | None = None
    ) -> list[FieldResult]:
        """Link every field; completes even if every lookup fails."""
        fields = list(fields)
        log.info("link_all_start", count=len(fields))
        results = await asyncio.gather(*(self.link_field(f, sink) for f in fields))
        log.info(
            "link_all_done",
            fields=len(results),
            accepted=self.stats.accepted,
            rejected=self.stats.rejected,
            oracle_failures=self.stats.oracle_failures,
        )
        return list(results)

    def _sync_oracle_stats(self) -> None:
        self.stats.oracle_queries = self.adapter.queries
        self.stats.oracle_failures = self.adapter.failures


async def link_fields(
    fields: Iterable[FieldText],
    config: LinkConfig | None = None,
    oracle: SearchOracle | None = None,
) -> list[FieldResult]:
    """One-shot helper: link fields with a fresh Linker and close it afterwards."""
    async with Linker(config, oracle) as linker:
        return await linker.link_all(fields)
