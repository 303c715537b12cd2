"""Tabular input and output for catalog exports (CSV, JSONL, XLSX)."""

from __future__ import annotations

from pathlib import Path

import pandas as pd

from wplink.types import FieldResult, FieldText

ANNOTATION_COLUMNS = [
    "field_id",
    "kind",
    "field_text",
    "component_id",
    "text",
    "start",
    "end",
    "canonical_title",
]


def _read_frame(path: Path) -> pd.DataFrame:
    if path.suffix == ".jsonl":
        return pd.read_json(path, lines=True, dtype=False)
    if path.suffix == ".xlsx":
        return pd.read_excel(path)
    return pd.read_csv(path, dtype=str)


def _split_values(value: object, separator: str) -> list[str]:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return []
    return [part.strip() for part in str(value).split(separator) if part.strip()]


def read_fields(
    path: str | Path,
    name_column: str = "name",
    subject_column: str = "subject",
    id_column: str | None = None,
    separator: str = "|",
) -> list[FieldText]:
    """Read name and subject fields from a catalog export.

    Each cell may hold several values joined by ``separator``. Field ids are
    ``<row id>-n<k>`` for names and ``<row id>-s<k>`` for subjects.
    """
    path = Path(path)
    df = _read_frame(path)

    if name_column not in df.columns and subject_column not in df.columns:
        raise ValueError(
            f"{path}: expected a '{name_column}' or '{subject_column}' column, "
            f"found {list(df.columns)}"
        )
    if id_column and id_column not in df.columns:
        raise ValueError(f"{path}: id column '{id_column}' not found")

    fields: list[FieldText] = []
    for i, row in df.iterrows():
        row_id = str(row[id_column]) if id_column and pd.notna(row[id_column]) else str(i)
        if name_column in df.columns:
            for k, text in enumerate(_split_values(row[name_column], separator)):
                fields.append(FieldText(text=text, kind="name", id=f"{row_id}-n{k}"))
        if subject_column in df.columns:
            for k, text in enumerate(_split_values(row[subject_column], separator)):
                fields.append(FieldText(text=text, kind="subject", id=f"{row_id}-s{k}"))
    return fields


def annotations_frame(results: list[FieldResult]) -> pd.DataFrame:
    rows = []
    for r in results:
        for a in r.annotations:
            rows.append({
                "field_id": r.field.id,
                "kind": r.field.kind,
                "field_text": r.field.text,
                "component_id": a.component_id,
                "text": a.text,
                "start": a.start,
                "end": a.end,
                "canonical_title": a.canonical_title,
            })
    return pd.DataFrame(rows, columns=ANNOTATION_COLUMNS)


def write_annotations(results: list[FieldResult], path: str | Path) -> None:
    """Write one row per annotation to CSV, JSONL or XLSX."""
    path = Path(path)
    df = annotations_frame(results)

    if path.suffix == ".jsonl":
        df.to_json(path, orient="records", lines=True, force_ascii=False)
    elif path.suffix == ".xlsx":
        df.to_excel(path, index=False)
    else:
        df.to_csv(path, index=False)
