#!/usr/bin/env python3
"""
Import companies or contacts from a delimited file and print the report as JSON.

Tables are created on first use (idempotent).

Usage:
    python3 scripts/run_import.py --kind <company|contact> --file <path> [options]

Examples:
    # Full run against the local SQLite database
    python3 scripts/run_import.py --kind company --file companies.csv

    # Contacts visible to pro and enterprise only, with a corrected mapping
    python3 scripts/run_import.py --kind contact --file contacts.csv \\
        --map job_title=Role --map email=4 --tiers pro,enterprise

    # Show the inferred mapping (row count, columns, ambiguities) without writing
    python3 scripts/run_import.py --kind contact --file contacts.csv --preview-only

    # Print the header template (with a sample row)
    python3 scripts/run_import.py --kind company --template --sample
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from uuid import UUID

# Project root on sys.path
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

DB_URL = "sqlite:///prospects.db"


def _parse_map(value: str) -> tuple[str, str]:
    field_name, sep, column = value.partition("=")
    if not sep or not field_name.strip():
        raise argparse.ArgumentTypeError(f"expected field=column, got {value!r}")
    return field_name.strip(), column.strip()


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run the company/contact import pipeline and print the report as JSON.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--kind",
        required=True,
        choices=("company", "contact"),
        help="Entity kind to import.",
    )
    parser.add_argument(
        "--file",
        type=Path,
        default=None,
        help="Path to the delimited source file (required unless --template).",
    )
    parser.add_argument(
        "--map",
        dest="mappings",
        action="append",
        type=_parse_map,
        default=[],
        metavar="FIELD=COLUMN",
        help="Override one field's column (0-based index or header text; empty unmaps). Repeatable.",
    )
    parser.add_argument(
        "--tiers",
        default=None,
        help="Comma-separated visibility tiers for every record (default: configured tiers).",
    )
    parser.add_argument(
        "--preview-only",
        action="store_true",
        help="Parse the file and print the inferred mapping. No DB writes.",
    )
    parser.add_argument(
        "--template",
        action="store_true",
        help="Print the header template for --kind and exit.",
    )
    parser.add_argument(
        "--sample",
        action="store_true",
        help="With --template, add a sample data row.",
    )
    parser.add_argument(
        "--actor-id",
        default=None,
        help="Actor UUID recorded on created rows (default: RUN_IMPORT_ACTOR_ID env or the system actor).",
    )
    parser.add_argument(
        "--db-url",
        default=DB_URL,
        help=f"Database URL (default: {DB_URL!r}).",
    )
    return parser.parse_args(argv)


def _column_overrides(pairs: list[tuple[str, str]], header: tuple[str, ...]) -> dict[str, int | str | None]:
    """Header text is looked up case-insensitively; anything else passes through."""
    lowered = [cell.lower() for cell in header]
    overrides: dict[str, int | str | None] = {}
    for field_name, column in pairs:
        if not column:
            overrides[field_name] = None
        elif column.isdigit():
            overrides[field_name] = column
        elif column.lower() in lowered:
            overrides[field_name] = lowered.index(column.lower())
        else:
            overrides[field_name] = column
    return overrides


def _print_json(payload: dict) -> None:
    print(json.dumps(payload, indent=2, default=str))


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    # Lazy imports so we fail fast on args first
    from prospect_kernel.exceptions import ProspectKernelError
    from prospect_kernel.logging_config import configure_logging
    from prospect_ingestion.services import ImportService
    from prospect_ingestion.store import InMemoryRecordStore

    configure_logging(stream=sys.stderr)

    if args.template:
        try:
            sys.stdout.write(ImportService(InMemoryRecordStore()).template(args.kind, include_sample=args.sample))
        except ProspectKernelError as e:
            print(f"ERROR: {e}", file=sys.stderr)
            return 2
        return 0

    if args.file is None:
        print("ERROR: --file is required unless --template is given", file=sys.stderr)
        return 2
    source_path = args.file.resolve()
    if not source_path.is_file():
        print(f"ERROR: File not found: {source_path}", file=sys.stderr)
        return 1
    content = source_path.read_bytes()

    if args.preview_only:
        try:
            preview = ImportService(InMemoryRecordStore()).preview(content, args.kind)
        except ProspectKernelError as e:
            print(f"ERROR: {e}", file=sys.stderr)
            return 2
        _print_json(
            {
                "entity_kind": preview.entity_kind.value,
                "rows": preview.probe.row_count,
                "blank_rows_dropped": preview.probe.blank_rows_dropped,
                "columns": list(preview.probe.columns),
                "mapping": preview.proposal.mapping.to_dict(),
                "unmapped_columns": list(preview.proposal.unmapped_columns),
                "ambiguities": [
                    {
                        "column_index": a.column_index,
                        "header": a.header,
                        "candidates": list(a.candidates),
                        "chosen": a.chosen,
                        "reason": a.reason,
                    }
                    for a in preview.proposal.ambiguities
                ],
                "sample_rows": [list(r) for r in preview.probe.sample_rows],
            }
        )
        return 0

    raw_actor = args.actor_id or os.environ.get("RUN_IMPORT_ACTOR_ID")
    try:
        actor_id = UUID(raw_actor) if raw_actor else None
    except ValueError:
        print(f"ERROR: Invalid actor id: {raw_actor!r}", file=sys.stderr)
        return 2

    from prospect_kernel.db.engine import create_tables, get_session, init_engine_from_url
    from prospect_ingestion.store import SqlAlchemyRecordStore

    try:
        init_engine_from_url(args.db_url)
        create_tables()
    except Exception as e:
        print(f"ERROR: Database init failed: {e}", file=sys.stderr)
        return 1

    session = get_session()
    try:
        service = ImportService(SqlAlchemyRecordStore(session))
        overrides = None
        if args.mappings:
            header = service.preview(content, args.kind).probe.columns
            overrides = _column_overrides(args.mappings, header)
        report = service.submit(
            content,
            args.kind,
            field_mapping_override=overrides,
            visibility_override=args.tiers,
            actor_id=actor_id,
        )
    except ProspectKernelError as e:
        session.rollback()
        print(f"ERROR: [{e.code}] {e}", file=sys.stderr)
        return 2
    finally:
        session.close()

    _print_json(report.to_dict())
    return 0 if report.failed == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
