from __future__ import annotations

import json
import re
from pathlib import Path

import pytest


def _record(**kw):
    from archipelago_catalog.models import GameRecord

    base = dict(name="Celeste", status="Official", platform="PC", emulator="")
    base.update(kw)
    return GameRecord(**base)


def test_artifact_shape(tmp_path: Path) -> None:
    from archipelago_catalog.dataset import write_dataset

    out = tmp_path / "output" / "games-data.json"
    recs = [
        _record(genres=["Platformer"], release_year=2018),
        _record(name="Yacht Dice", is_tool=True),
    ]
    write_dataset(out, recs, source_hash="abc123")

    data = json.loads(out.read_text(encoding="utf-8"))
    meta = data["metadata"]
    assert meta["count"] == 2
    assert meta["csvHash"] == "abc123"
    assert meta["version"] == "1.0.0"
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}", meta["generatedAt"])

    assert data["games"][0] == {
        "Game": "Celeste",
        "Status": "Official",
        "Platform": "PC",
        "Emulator": "",
        "IsArchipelagoTool": False,
        "Genres": ["Platformer"],
        "ReleaseYear": 2018,
        "IsMultiplayer": False,
    }
    assert data["games"][1]["IsArchipelagoTool"] is True
    assert data["games"][1]["ReleaseYear"] is None


def test_same_day_writes_are_identical(tmp_path: Path) -> None:
    from archipelago_catalog.dataset import write_dataset

    a = tmp_path / "a.json"
    b = tmp_path / "b.json"
    write_dataset(a, [_record()], source_hash="h", generated_at="2026-01-02")
    write_dataset(b, [_record()], source_hash="h", generated_at="2026-01-02")
    assert a.read_bytes() == b.read_bytes()


def test_write_failure_is_wrapped(tmp_path: Path) -> None:
    from archipelago_catalog.dataset import write_dataset

    target = tmp_path / "games-data.json"
    target.mkdir()
    with pytest.raises(RuntimeError, match="Failed to save games data"):
        write_dataset(target, [_record()], source_hash="h")


def test_load_metadata_handles_missing_and_corrupt_files(tmp_path: Path) -> None:
    from archipelago_catalog.dataset import load_metadata, write_dataset

    assert load_metadata(tmp_path / "missing.json") is None
    bad = tmp_path / "bad.json"
    bad.write_text("[", encoding="utf-8")
    assert load_metadata(bad) is None

    good = tmp_path / "good.json"
    write_dataset(good, [_record()], source_hash="h1")
    assert load_metadata(good)["csvHash"] == "h1"


def test_load_dataset_reads_records_back(tmp_path: Path) -> None:
    from archipelago_catalog.dataset import load_dataset, write_dataset

    p = tmp_path / "games-data.json"
    recs = [_record(genres=["Platformer"], release_year=2018, is_multiplayer=True)]
    write_dataset(p, recs, source_hash="h")
    assert load_dataset(p) == recs


def test_load_dataset_accepts_string_tool_flags(tmp_path: Path) -> None:
    from archipelago_catalog.dataset import load_dataset

    p = tmp_path / "games-data.json"
    p.write_text(
        json.dumps(
            {
                "games": [
                    {"Game": "Paint", "Status": "", "Platform": "PC", "Emulator": "", "IsArchipelagoTool": "true"}
                ],
                "metadata": {},
            }
        ),
        encoding="utf-8",
    )
    recs = load_dataset(p)
    assert recs[0].is_tool is True
    assert recs[0].genres == []
