from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Sequence

from .config import DATASET
from .models import GameRecord
from .utils.utilities import load_json, save_json


def today_utc() -> str:
    return datetime.now(timezone.utc).date().isoformat()


def write_dataset(
    path: str | Path,
    records: Sequence[GameRecord],
    *,
    source_hash: str,
    generated_at: str | None = None,
) -> None:
    """
    Write the games dataset consumed by the site.

    `generatedAt` is a date, not a timestamp, so same-day rebuilds produce identical files.
    """
    p = Path(path)
    logging.info(f"[BUILD] Saving games data to: {p}")
    data = {
        "games": [r.to_artifact_dict() for r in records],
        "metadata": {
            "count": len(records),
            "generatedAt": generated_at or today_utc(),
            "version": DATASET.schema_version,
            "csvHash": source_hash,
        },
    }
    try:
        save_json(data, p)
    except OSError as e:
        raise RuntimeError(f"Failed to save games data to {p}: {e}") from e
    logging.info(f"[BUILD] Saved {len(records)} games")


def load_metadata(path: str | Path) -> dict[str, Any] | None:
    raw = load_json(path)
    if not isinstance(raw, dict):
        return None
    metadata = raw.get("metadata")
    return metadata if isinstance(metadata, dict) else None


def load_dataset(path: str | Path) -> list[GameRecord]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Games data not found: {p} (run `build` first)")
    raw = load_json(p)
    if not isinstance(raw, dict) or not isinstance(raw.get("games"), list):
        raise ValueError(f"Games data has an unsupported format: {p}")
    return [GameRecord.from_artifact_dict(g) for g in raw["games"] if isinstance(g, dict)]
