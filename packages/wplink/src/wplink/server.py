"""FastAPI annotation service for the catalog page script."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Literal

import structlog
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from wplink.annotations import AnnotationSink, render_html
from wplink.config import LinkConfig
from wplink.linker import Linker
from wplink.oracle import SearchOracle
from wplink.types import FieldResult, FieldText

log = structlog.get_logger()


class FieldIn(BaseModel):
    """A raw field from the page: a contributor name or a subject heading."""

    text: str
    kind: Literal["name", "subject"] = "subject"
    id: str | None = None


class AnnotateRequest(BaseModel):
    fields: list[FieldIn]


class AnnotationOut(BaseModel):
    component_id: str
    text: str
    start: int
    end: int
    canonical_title: str


class FieldOut(BaseModel):
    id: str
    kind: str
    text: str
    html: str
    annotations: list[AnnotationOut]


class MarkupOut(BaseModel):
    """Names the page script needs to style spans and start previews."""

    link_class: str
    data_attr: str
    name_selector: str
    subject_selector: str


def _field_out(result: FieldResult, config: LinkConfig) -> FieldOut:
    return FieldOut(
        id=result.field.id,
        kind=result.field.kind,
        text=result.field.text,
        html=render_html(result, config.markup),
        annotations=[
            AnnotationOut(
                component_id=a.component_id,
                text=a.text,
                start=a.start,
                end=a.end,
                canonical_title=a.canonical_title,
            )
            for a in result.annotations
        ],
    )


def create_app(
    config: LinkConfig | None = None,
    oracle: SearchOracle | None = None,
) -> FastAPI:
    """Create the FastAPI application."""
    config = config or LinkConfig()
    linker = Linker(config, oracle)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("server_start", api_url=config.oracle.api_url)
        yield
        await linker.aclose()
        log.info("server_stop", stats=linker.stats.__dict__)

    app = FastAPI(title="wplink annotation service", lifespan=lifespan)
    app.state.linker = linker

    @app.get("/api/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/config")
    async def get_config() -> MarkupOut:
        """Markup settings shared with the page script."""
        m = config.markup
        return MarkupOut(
            link_class=m.link_class,
            data_attr=m.data_attr,
            name_selector=m.name_selector,
            subject_selector=m.subject_selector,
        )

    @app.post("/api/annotate")
    async def annotate(req: AnnotateRequest) -> list[FieldOut]:
        """Link every posted field and return its annotations and markup."""
        if not req.fields:
            raise HTTPException(status_code=400, detail="fields cannot be empty")

        fields = [
            FieldText(text=f.text, kind=f.kind, id=f.id if f.id is not None else str(i))
            for i, f in enumerate(req.fields)
        ]
        ids = [f.id for f in fields]
        if len(set(ids)) != len(ids):
            raise HTTPException(status_code=400, detail="field ids must be unique")

        results = await linker.link_all(fields, sink=AnnotationSink())
        return [_field_out(r, config) for r in results]

    @app.get("/api/lookup")
    async def lookup(term: str, kind: Literal["name", "subject"] = "subject") -> FieldOut:
        """Link a single field given as a query parameter."""
        if not term.strip():
            raise HTTPException(status_code=400, detail="term cannot be empty")
        result = await linker.link_field(FieldText(text=term, kind=kind), sink=AnnotationSink())
        return _field_out(result, config)

    return app
