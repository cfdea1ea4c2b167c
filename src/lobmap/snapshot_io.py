"""Load picklist snapshots and alias tables from files or DuckDB.

These loaders only read. A Resolver never calls them itself; callers load a
snapshot, build a Resolver, and hand it to a ``ResolverHandle`` when the
snapshot can change at runtime.

Row shape accepted everywhere: ``{"id": 2005, "text": "Sikorsky"}``. The
``value``/``label`` spelling used by picklist APIs is accepted too.
"""
from __future__ import annotations

import importlib
import re
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import orjson

from lobmap.aliases import AliasTable
from lobmap.errors import AliasTableError, SnapshotError
from lobmap.io_utils import load_json, load_jsonl, save_json
from lobmap.resolver import PicklistEntry

# Dynamic DuckDB import for pyright compatibility
_duckdb_mod = importlib.import_module("duckdb")

_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_INT_RE = re.compile(r"-?[0-9]+")
_ID_KEYS = ("id", "value")
_TEXT_KEYS = ("text", "label")


def _first(row: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if key in row:
            return row[key]
    return None


def _coerce_id(value: Any, index: int) -> int:
    if isinstance(value, bool):
        raise SnapshotError(f"Row {index}: id must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and _INT_RE.fullmatch(value.strip()):
        return int(value.strip())
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise SnapshotError(f"Row {index}: id must be an integer, got {value!r}")


def picklist_from_rows(rows: Iterable[Mapping[str, Any]]) -> tuple[PicklistEntry, ...]:
    """Build snapshot entries from row dicts, preserving row order."""
    entries: list[PicklistEntry] = []
    for index, row in enumerate(rows):
        if not isinstance(row, Mapping):
            raise SnapshotError(f"Row {index}: expected an object, got {type(row).__name__}")
        raw_id = _first(row, _ID_KEYS)
        text = _first(row, _TEXT_KEYS)
        if raw_id is None or text is None:
            raise SnapshotError(f"Row {index}: missing id or text in {dict(row)!r}")
        if not isinstance(text, str):
            raise SnapshotError(f"Row {index}: text must be a string, got {text!r}")
        entry_id = _coerce_id(raw_id, index)
        try:
            entries.append(PicklistEntry(entry_id, text))
        except SnapshotError as exc:
            raise SnapshotError(f"Row {index}: {exc}") from exc
    return tuple(entries)


def load_picklist_json(path: Path) -> tuple[PicklistEntry, ...]:
    """Load a snapshot from a JSON list of rows or ``{"entries": [...]}``."""
    try:
        payload = load_json(path)
    except orjson.JSONDecodeError as exc:
        raise SnapshotError(f"{path}: invalid JSON: {exc}") from exc
    if isinstance(payload, dict):
        payload = payload.get("entries")
    if not isinstance(payload, list):
        raise SnapshotError(f"{path}: expected a list of picklist rows")
    return picklist_from_rows(payload)


def load_picklist_jsonl(path: Path) -> tuple[PicklistEntry, ...]:
    try:
        rows = load_jsonl(path)
    except orjson.JSONDecodeError as exc:
        raise SnapshotError(f"{path}: invalid JSON line: {exc}") from exc
    return picklist_from_rows(rows)


def load_picklist_duckdb(
    db_path: Path,
    *,
    table: str = "lob_picklist",
    id_column: str = "id",
    text_column: str = "text",
) -> tuple[PicklistEntry, ...]:
    """Read a snapshot from a DuckDB table over a read-only connection."""
    for name in (table, id_column, text_column):
        if not _IDENT_RE.match(name):
            raise ValueError(f"Not a plain SQL identifier: {name!r}")
    if not db_path.exists():
        raise FileNotFoundError(f"Picklist database not found: {db_path}")
    conn: Any = _duckdb_mod.connect(str(db_path), read_only=True)
    try:
        rows = conn.execute(
            f"SELECT {id_column}, {text_column} FROM {table} ORDER BY {id_column}"
        ).fetchall()
    finally:
        conn.close()
    return picklist_from_rows({"id": r[0], "text": r[1]} for r in rows)


def save_picklist_json(entries: Iterable[PicklistEntry], path: Path) -> None:
    save_json([{"id": e.id, "text": e.text} for e in entries], path)


def load_alias_table(path: Path) -> AliasTable:
    """Load ``{alias: target}`` or ``{"aliases": {alias: target}}``."""
    try:
        payload = load_json(path)
    except orjson.JSONDecodeError as exc:
        raise AliasTableError(f"{path}: invalid JSON: {exc}") from exc
    if isinstance(payload, dict) and isinstance(payload.get("aliases"), dict):
        payload = payload["aliases"]
    if not isinstance(payload, dict):
        raise AliasTableError(f"{path}: expected an object of alias -> target")
    for alias, target in payload.items():
        if not isinstance(target, str):
            raise AliasTableError(f"{path}: target of {alias!r} must be a string")
    return AliasTable(payload)
