from __future__ import annotations

import json
from pathlib import Path

import pytest

CSV = (
    "Game,Status,Platform,Emulator,IsArchipelagoTool\n"
    "Celeste,Official,PC,,false\n"
    "Portal 2,Stable,PC,,false\n"
    ",Stable,SNES,BizHawk,false\n"
    "Yacht Dice,Official,PC,,true\n"
)


class CountingClient:
    def __init__(self):
        self.calls: list[str] = []

    def enrich(self, game_name):
        from archipelago_catalog.models import Enrichment

        self.calls.append(game_name)
        if game_name == "Portal 2":
            return Enrichment(genres=("Puzzle",), release_year=2011, is_multiplayer=True)
        return Enrichment.empty("not_found")


def _paths(tmp_path: Path) -> dict[str, Path]:
    src = tmp_path / "games.csv"
    src.write_text(CSV, encoding="utf-8")
    return {
        "source_csv": src,
        "output_json": tmp_path / "output" / "games-data.json",
        "cache_path": tmp_path / "enrichment-cache.json",
    }


def test_full_build_writes_dataset_and_cache(tmp_path: Path) -> None:
    from archipelago_catalog.pipelines.build_pipeline import run_build
    from archipelago_catalog.source import file_hash

    paths = _paths(tmp_path)
    client = CountingClient()
    result = run_build(**paths, client=client)

    assert result.skipped is False
    assert result.parsed == 3
    assert len(result.parse_errors) == 1
    assert result.parse_errors[0].field == "Game"
    assert client.calls == ["Celeste", "Portal 2", "Yacht Dice"]

    data = json.loads(paths["output_json"].read_text(encoding="utf-8"))
    assert [g["Game"] for g in data["games"]] == ["Celeste", "Portal 2", "Yacht Dice"]
    assert data["games"][1]["Genres"] == ["Puzzle"]
    assert data["games"][2]["IsArchipelagoTool"] is True
    assert data["metadata"]["count"] == 3
    assert data["metadata"]["csvHash"] == file_hash(paths["source_csv"])

    cache = json.loads(paths["cache_path"].read_text(encoding="utf-8"))
    assert {e["gameName"] for e in cache["entries"]} == {"Celeste", "Portal 2", "Yacht Dice"}


def test_unchanged_source_skips_everything(tmp_path: Path) -> None:
    from archipelago_catalog.pipelines.build_pipeline import run_build

    paths = _paths(tmp_path)
    run_build(**paths, client=CountingClient())
    before_output = paths["output_json"].read_bytes()
    paths["cache_path"].unlink()

    client = CountingClient()
    result = run_build(**paths, client=client)

    assert result.skipped is True
    assert client.calls == []
    assert paths["output_json"].read_bytes() == before_output
    # The skip path does not even rewrite the cache.
    assert not paths["cache_path"].exists()


def test_changed_source_uses_cache_for_known_names(tmp_path: Path) -> None:
    from archipelago_catalog.pipelines.build_pipeline import run_build

    paths = _paths(tmp_path)
    run_build(**paths, client=CountingClient())

    with paths["source_csv"].open("a", encoding="utf-8") as f:
        f.write("Tunic,Official,PC,,false\n")

    client = CountingClient()
    result = run_build(**paths, client=client)
    assert result.skipped is False
    assert client.calls == ["Tunic"]
    assert result.enrich_stats.cache_hits == 3


def test_force_rebuilds_without_network_calls(tmp_path: Path) -> None:
    from archipelago_catalog.pipelines.build_pipeline import run_build

    paths = _paths(tmp_path)
    run_build(**paths, client=CountingClient())

    client = CountingClient()
    result = run_build(**paths, client=client, force=True)
    assert result.skipped is False
    assert client.calls == []


def test_no_enrich_leaves_cache_alone(tmp_path: Path) -> None:
    from archipelago_catalog.pipelines.build_pipeline import run_build

    paths = _paths(tmp_path)
    result = run_build(**paths, client=None, enrich=False)

    assert result.enrich_stats is None
    assert not paths["cache_path"].exists()
    data = json.loads(paths["output_json"].read_text(encoding="utf-8"))
    assert all(g["Genres"] == [] and g["ReleaseYear"] is None for g in data["games"])


def test_missing_source_is_fatal(tmp_path: Path) -> None:
    from archipelago_catalog.pipelines.build_pipeline import run_build

    with pytest.raises(FileNotFoundError):
        run_build(
            source_csv=tmp_path / "missing.csv",
            output_json=tmp_path / "out.json",
            cache_path=tmp_path / "cache.json",
            client=CountingClient(),
        )


def test_zero_valid_rows_is_fatal(tmp_path: Path) -> None:
    from archipelago_catalog.pipelines.build_pipeline import run_build

    src = tmp_path / "games.csv"
    src.write_text("Game,Status\n,Official\n", encoding="utf-8")
    with pytest.raises(ValueError, match="No games parsed"):
        run_build(
            source_csv=src,
            output_json=tmp_path / "out.json",
            cache_path=tmp_path / "cache.json",
            client=CountingClient(),
        )
    assert not (tmp_path / "out.json").exists()


def test_unwritable_output_is_fatal(tmp_path: Path) -> None:
    from archipelago_catalog.pipelines.build_pipeline import run_build

    paths = _paths(tmp_path)
    paths["output_json"].mkdir(parents=True)
    with pytest.raises(RuntimeError, match="Failed to save games data"):
        run_build(**paths, client=CountingClient())
