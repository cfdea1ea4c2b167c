#!/usr/bin/env python3
"""Resolve Line-of-Business labels against a picklist snapshot.

Usage:
    python3 scripts/resolve_lob.py --picklist picklist.json --label SAC --label "Aero"
    python3 scripts/resolve_lob.py --db lob.duckdb --table lob_picklist \
      --records legacy.jsonl --output remapped.jsonl

Structured JSON output goes to stdout; log messages go to stderr.
The picklist and alias paths default to $LOBMAP_PICKLIST and $LOBMAP_ALIASES.
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Any

import orjson

from lobmap.aliases import AliasTable
from lobmap.errors import LobmapError
from lobmap.io_utils import load_jsonl, save_jsonl
from lobmap.records import (
    DEFAULT_ID_FIELD,
    DEFAULT_TEXT_FIELD,
    remap_records,
    summarize,
)
from lobmap.resolver import PicklistEntry, Resolver
from lobmap.snapshot_io import (
    load_alias_table,
    load_picklist_duckdb,
    load_picklist_json,
    load_picklist_jsonl,
    save_picklist_json,
)

log = logging.getLogger("resolve_lob")


def dump_json(obj: Any) -> None:
    sys.stdout.buffer.write(orjson.dumps(obj, option=orjson.OPT_INDENT_2))
    sys.stdout.buffer.write(b"\n")


def _load_picklist(args: argparse.Namespace) -> tuple[PicklistEntry, ...]:
    if args.db:
        return load_picklist_duckdb(
            Path(args.db),
            table=args.table,
            id_column=args.id_column,
            text_column=args.text_column,
        )
    path = Path(args.picklist)
    if path.suffix == ".jsonl":
        return load_picklist_jsonl(path)
    return load_picklist_json(path)


def _load_aliases(args: argparse.Namespace) -> AliasTable:
    if args.aliases:
        return load_alias_table(Path(args.aliases))
    if args.no_default_aliases:
        return AliasTable.empty()
    return AliasTable.default()


def _label_results(resolver: Resolver, labels: list[str]) -> list[dict[str, Any]]:
    results: list[dict[str, Any]] = []
    for raw in labels:
        match = resolver.match(raw)
        row: dict[str, Any] = {"raw": raw, "resolved": match.resolved, "tier": match.tier}
        row.update(match.result.to_dict())
        if match.alias_target is not None:
            row["alias_target"] = match.alias_target
        results.append(row)
    return results


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Resolve free-text Line-of-Business labels to picklist entries."
    )
    source = parser.add_argument_group("picklist source")
    source.add_argument(
        "--picklist",
        default=os.environ.get("LOBMAP_PICKLIST"),
        help="Picklist snapshot (.json or .jsonl). Default: $LOBMAP_PICKLIST",
    )
    source.add_argument("--db", default=None, help="DuckDB file holding the picklist table")
    source.add_argument("--table", default="lob_picklist", help="Picklist table name")
    source.add_argument("--id-column", default="id")
    source.add_argument("--text-column", default="text")

    parser.add_argument(
        "--aliases",
        default=os.environ.get("LOBMAP_ALIASES"),
        help="Alias JSON file. Default: $LOBMAP_ALIASES, else built-in aliases",
    )
    parser.add_argument(
        "--no-default-aliases",
        action="store_true",
        help="Do not apply the built-in alias table when --aliases is not given.",
    )
    parser.add_argument(
        "--on-duplicate",
        choices=("reject", "last"),
        default="reject",
        help="Duplicate normalized picklist text: fail (default) or keep the last entry.",
    )

    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument("--label", action="append", help="Label to resolve (repeatable)")
    mode.add_argument("--records", default=None, help="JSONL file of legacy records")
    mode.add_argument(
        "--dump-snapshot",
        default=None,
        help="Write the loaded picklist snapshot to this JSON path and exit.",
    )

    parser.add_argument("--text-field", default=DEFAULT_TEXT_FIELD)
    parser.add_argument("--id-field", default=DEFAULT_ID_FIELD)
    parser.add_argument("--output", default=None, help="Remapped records JSONL path")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if not args.db and not args.picklist:
        parser.error("one of --picklist or --db is required")

    try:
        entries = _load_picklist(args)
        if args.dump_snapshot:
            save_picklist_json(entries, Path(args.dump_snapshot))
            dump_json({"status": "ok", "entries": len(entries), "output": args.dump_snapshot})
            return 0
        resolver = Resolver(entries, _load_aliases(args), on_duplicate=args.on_duplicate)
    except (LobmapError, FileNotFoundError, ValueError) as exc:
        log.error("Cannot build resolver: %s", exc)
        dump_json({"status": "error", "error": str(exc)})
        return 2

    log.info("Loaded %d picklist entries, %d aliases", len(resolver), len(resolver.aliases))

    if args.label:
        dump_json({"status": "ok", "results": _label_results(resolver, args.label)})
        return 0

    try:
        records = load_jsonl(Path(args.records))
    except (FileNotFoundError, orjson.JSONDecodeError) as exc:
        log.error("Cannot read records %s: %s", args.records, exc)
        dump_json({"status": "error", "error": f"{args.records}: {exc}"})
        return 2
    summary = summarize(records, resolver, text_field=args.text_field)
    if args.output:
        remapped = remap_records(
            records, resolver, text_field=args.text_field, id_field=args.id_field,
        )
        save_jsonl(remapped, Path(args.output))
        log.info("Wrote %d records to %s", len(remapped), args.output)
    dump_json({"status": "ok", "summary": summary, "output": args.output})
    return 0


if __name__ == "__main__":
    sys.exit(main())
