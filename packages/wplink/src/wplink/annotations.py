"""Annotation sink and markup rendering for the presentation layer."""

from __future__ import annotations

import html
from dataclasses import dataclass, field

import structlog

from wplink.config import MarkupConfig
from wplink.types import Annotation, Component, FieldResult, MatchDecision

log = structlog.get_logger()


@dataclass
class AnnotationSink:
    """Collects annotations for accepted decisions; rejected ones leave no trace."""

    annotations: list[Annotation] = field(default_factory=list)

    def emit(self, field_id: str, component: Component, decision: MatchDecision) -> Annotation | None:
        if not decision.accepted or decision.canonical_title is None:
            return None
        annotation = Annotation(
            field_id=field_id,
            component_id=component.id,
            text=component.text,
            start=component.start,
            end=component.end,
            canonical_title=decision.canonical_title,
        )
        self.annotations.append(annotation)
        log.debug(
            "annotation_emitted",
            component_id=component.id,
            title=decision.canonical_title,
        )
        return annotation

    def for_field(self, field_id: str) -> list[Annotation]:
        return sorted(
            (a for a in self.annotations if a.field_id == field_id),
            key=lambda a: a.start,
        )


def render_html(result: FieldResult, markup: MarkupConfig | None = None) -> str:
    """Render the field text with each annotated span wrapped for preview.

    Unannotated text is copied through (escaped) so the output reads exactly
    like the input, separators included.
    """
    markup = markup or MarkupConfig()
    text = result.field.text
    out: list[str] = []
    cursor = 0
    for annotation in sorted(result.annotations, key=lambda a: a.start):
        if annotation.start < cursor:
            continue  # overlapping spans cannot be nested
        out.append(html.escape(text[cursor:annotation.start]))
        out.append(
            f'<span class="{html.escape(markup.link_class)}" '
            f'{markup.data_attr}="{html.escape(annotation.canonical_title)}">'
            f"{html.escape(text[annotation.start:annotation.end])}</span>"
        )
        cursor = annotation.end
    out.append(html.escape(text[cursor:]))
    return "".join(out)
