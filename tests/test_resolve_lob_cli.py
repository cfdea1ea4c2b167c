"""Smoke tests for the resolve_lob CLI."""
from __future__ import annotations

import json
import os
import subprocess
import sys
from pathlib import Path

import duckdb

ROOT = Path(__file__).resolve().parents[1]

PICKLIST = [
    {"id": 2001, "text": "Aeronautics"},
    {"id": 2005, "text": "Sikorsky"},
    {"id": 2010, "text": "Cyber, Ships & Advanced Technologies"},
]


def _run(*args: str) -> subprocess.CompletedProcess[str]:
    env = os.environ.copy()
    env["PYTHONPATH"] = str(ROOT / "src")
    env.pop("LOBMAP_PICKLIST", None)
    env.pop("LOBMAP_ALIASES", None)
    return subprocess.run(
        [sys.executable, str(ROOT / "scripts" / "resolve_lob.py"), *args],
        cwd=str(ROOT),
        env=env,
        capture_output=True,
        text=True,
        check=False,
    )


def _write_picklist(tmp_path: Path, rows: list[dict[str, object]] = PICKLIST) -> Path:
    path = tmp_path / "picklist.json"
    path.write_text(json.dumps(rows))
    return path


def test_resolve_labels(tmp_path: Path) -> None:
    picklist = _write_picklist(tmp_path)
    proc = _run(
        "--picklist", str(picklist),
        "--label", "SAC",
        "--label", "Cyber Ships and Advanced Technologies",
        "--label", "Unknown Division",
    )
    assert proc.returncode == 0, proc.stderr
    payload = json.loads(proc.stdout)
    assert payload["status"] == "ok"
    sac, cyber, unknown = payload["results"]
    assert sac == {
        "raw": "SAC",
        "resolved": True,
        "tier": "exact",
        "id": 2005,
        "text": "Sikorsky",
        "alias_target": "Sikorsky",
    }
    assert cyber["id"] == 2010
    assert cyber["tier"] == "relaxed"
    assert unknown["resolved"] is False
    assert unknown["id"] is None


def test_no_default_aliases(tmp_path: Path) -> None:
    picklist = _write_picklist(tmp_path)
    proc = _run("--picklist", str(picklist), "--no-default-aliases", "--label", "SAC")
    assert proc.returncode == 0, proc.stderr
    assert json.loads(proc.stdout)["results"][0]["resolved"] is False


def test_remap_records_from_duckdb(tmp_path: Path) -> None:
    db = tmp_path / "lob.duckdb"
    con = duckdb.connect(str(db))
    con.execute("CREATE TABLE lob_picklist (id INTEGER, text VARCHAR)")
    con.execute("INSERT INTO lob_picklist VALUES (2005, 'Sikorsky'), (2001, 'Aeronautics')")
    con.close()

    records = tmp_path / "legacy.jsonl"
    records.write_text(
        '{"rec": 1, "line_of_business": "sac"}\n'
        '{"rec": 2, "line_of_business": "Mystery Unit"}\n'
    )
    output = tmp_path / "remapped.jsonl"
    proc = _run("--db", str(db), "--records", str(records), "--output", str(output))
    assert proc.returncode == 0, proc.stderr

    payload = json.loads(proc.stdout)
    assert payload["summary"]["resolved"] == 1
    assert payload["summary"]["unresolved_labels"] == [{"label": "Mystery Unit", "count": 1}]

    rows = [json.loads(line) for line in output.read_text().splitlines() if line]
    assert rows[0] == {"rec": 1, "line_of_business": "Sikorsky", "line_of_business_id": 2005}
    assert rows[1] == {"rec": 2, "line_of_business": "Mystery Unit", "line_of_business_id": None}


def test_duplicate_picklist_text_fails(tmp_path: Path) -> None:
    picklist = _write_picklist(
        tmp_path, [{"id": 1, "text": "Space"}, {"id": 2, "text": "SPACE"}],
    )
    proc = _run("--picklist", str(picklist), "--label", "space")
    assert proc.returncode == 2
    payload = json.loads(proc.stdout)
    assert payload["status"] == "error"
    assert "space" in payload["error"]

    proc = _run("--picklist", str(picklist), "--on-duplicate", "last", "--label", "space")
    assert proc.returncode == 0, proc.stderr
    assert json.loads(proc.stdout)["results"][0]["id"] == 2


def test_unreadable_records_file_reports_error(tmp_path: Path) -> None:
    picklist = _write_picklist(tmp_path)
    bad = tmp_path / "bad.jsonl"
    bad.write_text("{not json\n")
    proc = _run("--picklist", str(picklist), "--records", str(bad))
    assert proc.returncode == 2
    payload = json.loads(proc.stdout)
    assert payload["status"] == "error"
    assert "bad.jsonl" in payload["error"]

    proc = _run("--picklist", str(picklist), "--records", str(tmp_path / "missing.jsonl"))
    assert proc.returncode == 2
    assert json.loads(proc.stdout)["status"] == "error"


def test_dump_snapshot(tmp_path: Path) -> None:
    picklist = _write_picklist(tmp_path)
    out = tmp_path / "snapshot.json"
    proc = _run("--picklist", str(picklist), "--dump-snapshot", str(out))
    assert proc.returncode == 0, proc.stderr
    assert json.loads(out.read_text()) == PICKLIST
