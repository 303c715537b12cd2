"""wplink - Catalog name and subject linking to Wikipedia articles."""

from wplink.annotations import AnnotationSink, render_html
from wplink.config import LinkConfig
from wplink.linker import Linker, LinkerStats, link_fields
from wplink.oracle import OracleAdapter, SearchOracle, WikipediaSearchOracle
from wplink.types import Annotation, FieldResult, FieldText, MatchDecision, SearchResult

__all__ = [
    "Annotation",
    "AnnotationSink",
    "FieldResult",
    "FieldText",
    "LinkConfig",
    "Linker",
    "LinkerStats",
    "MatchDecision",
    "OracleAdapter",
    "SearchOracle",
    "SearchResult",
    "WikipediaSearchOracle",
    "link_fields",
    "render_html",
]
