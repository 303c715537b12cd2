"""CLI tool for linking catalog names and subjects to Wikipedia articles."""

import argparse
import asyncio

import pandas as pd
import structlog

from wplink.annotations import render_html
from wplink.config import LinkConfig
from wplink.io import annotations_frame, read_fields, write_annotations
from wplink.linker import Linker
from wplink.logging import LOG_FORMATS, configure_logging
from wplink.types import FieldResult, FieldText


def _build_config(args: argparse.Namespace) -> LinkConfig:
    """Build a LinkConfig from CLI args."""
    config = LinkConfig()
    if args.api_url:
        config.oracle.api_url = args.api_url
    if args.concurrency is not None:
        config.oracle.max_concurrency = args.concurrency
    if args.timeout is not None:
        config.oracle.timeout = args.timeout if args.timeout > 0 else None
    return config


async def _run(fields: list[FieldText], config: LinkConfig) -> tuple[list[FieldResult], Linker]:
    async with Linker(config) as linker:
        results = await linker.link_all(fields)
    return results, linker


def cmd_annotate(args: argparse.Namespace) -> None:
    log = structlog.get_logger()
    log.info("load_fields_start", input=args.input)
    fields = read_fields(
        args.input,
        name_column=args.name_column,
        subject_column=args.subject_column,
        id_column=args.id_column,
    )
    names = sum(1 for f in fields if f.kind == "name")
    log.info("fields_loaded", names=names, subjects=len(fields) - names)

    results, linker = asyncio.run(_run(fields, _build_config(args)))

    if args.show:
        _show_annotations(annotations_frame(results))

    _print_stats(linker)
    write_annotations(results, args.output)
    print(f"\nSaved to: {args.output}")


def cmd_lookup(args: argparse.Namespace) -> None:
    config = _build_config(args)
    field_text = FieldText(text=args.text, kind=args.kind)
    results, _ = asyncio.run(_run([field_text], config))
    result = results[0]

    if not result.annotations:
        print(f"No match for: {args.text}")
        return
    for a in result.annotations:
        print(f"{a.text!r} -> {a.canonical_title}")
    if args.html:
        print(render_html(result, config.markup))


def cmd_serve(args: argparse.Namespace) -> None:
    """Run the annotation service."""
    import uvicorn

    from wplink.server import create_app

    log = structlog.get_logger()
    config = _build_config(args)
    log.info("serve_start", host=args.host, port=args.port, api_url=config.oracle.api_url)
    uvicorn.run(create_app(config), host=args.host, port=args.port, log_level="warning")


def _show_annotations(df: pd.DataFrame) -> None:
    if df.empty:
        print("\n=== No annotations ===")
        return
    print(f"\n=== Annotations ({len(df)}) ===")
    print(df[["field_id", "text", "canonical_title"]].to_string(index=False))


def _print_stats(linker: Linker) -> None:
    """Print linking statistics."""
    s = linker.stats
    print("\n--- Statistics ---")
    print(f"Fields: {s.fields}")
    print(f"Components: {s.components}")
    print(f"Oracle queries: {s.oracle_queries}")
    if s.oracle_failures > 0:
        print(f"Oracle failures: {s.oracle_failures}")
    print(f"Accepted: {s.accepted}")
    print(f"Rejected: {s.rejected}")
    for tier, count in sorted(s.tiers.items(), key=lambda kv: -kv[1]):
        print(f"  {tier}: {count}")


def main() -> None:
    # Parent parser with global options (inherited by all subcommands)
    parent_parser = argparse.ArgumentParser(add_help=False)
    parent_parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (default: LOG_LEVEL env var or INFO)",
    )
    parent_parser.add_argument(
        "--log-format",
        choices=list(LOG_FORMATS),
        help="Log output format (default: LOG_FORMAT env var or console)",
    )
    parent_parser.add_argument("--api-url", help="Search API endpoint (default: English Wikipedia)")
    parent_parser.add_argument(
        "--concurrency", type=int, help="Max in-flight search requests (0 = unlimited)"
    )
    parent_parser.add_argument(
        "--timeout", type=float, help="Per-request timeout in seconds (0 = none)"
    )

    parser = argparse.ArgumentParser(
        description="Catalog name/subject to Wikipedia linker",
        parents=[parent_parser],
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    annotate_parser = subparsers.add_parser(
        "annotate", parents=[parent_parser], help="Annotate a catalog export"
    )
    annotate_parser.add_argument("--input", required=True, help="CSV, JSONL or XLSX file")
    annotate_parser.add_argument("--output", default="annotations.csv", help="Output file path")
    annotate_parser.add_argument("--name-column", default="name", help="Column with names")
    annotate_parser.add_argument("--subject-column", default="subject", help="Column with subjects")
    annotate_parser.add_argument("--id-column", help="Column with record ids")
    annotate_parser.add_argument("--show", action="store_true", help="Display annotations on screen")
    annotate_parser.set_defaults(func=cmd_annotate)

    lookup_parser = subparsers.add_parser("lookup", parents=[parent_parser], help="Link a single field")
    lookup_parser.add_argument("text", help='Field text, e.g. "Curie, Marie"')
    lookup_parser.add_argument("--kind", choices=["name", "subject"], default="subject")
    lookup_parser.add_argument("--html", action="store_true", help="Also print rendered markup")
    lookup_parser.set_defaults(func=cmd_lookup)

    serve_parser = subparsers.add_parser("serve", parents=[parent_parser], help="Run the HTTP service")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8765, help="Server port (default: 8765)")
    serve_parser.set_defaults(func=cmd_serve)

    args = parser.parse_args()
    configure_logging(args.log_level, args.log_format)
    args.func(args)


if __name__ == "__main__":
    main()
