from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .config import CACHE
from .models import OUTCOME_UNKNOWN, OUTCOMES, Enrichment
from .utils.utilities import load_json, save_json


class EnrichmentCache:
    """
    Enrichment results keyed by exact game name, persisted as one JSON document.

    Loaded once before enrichment and saved once after it. Entries are only ever added or
    overwritten here; removing them is an explicit operator action (see `prune-cache`).
    """

    def __init__(self, entries: dict[str, Enrichment] | None = None):
        self._entries: dict[str, Enrichment] = dict(entries or {})

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, name: str) -> Enrichment | None:
        return self._entries.get(name)

    def set(self, name: str, enrichment: Enrichment) -> None:
        self._entries[name] = enrichment

    def prune(self, outcomes: set[str]) -> list[str]:
        """
        Drop every entry whose outcome is in `outcomes`; returns the removed names.
        """
        removed = [name for name, e in self._entries.items() if e.outcome in outcomes]
        for name in removed:
            del self._entries[name]
        return removed

    def names(self) -> list[str]:
        return list(self._entries)

    # ----------------------------
    # Persistence
    # ----------------------------

    @classmethod
    def load(cls, path: str | Path) -> EnrichmentCache:
        p = Path(path)
        if not p.exists():
            logging.info("[CACHE] No cache file found, starting fresh")
            return cls()

        raw = load_json(p)
        if not isinstance(raw, dict):
            logging.warning(f"[CACHE] Unreadable cache file {p}, ignoring cache")
            return cls()

        found_version = raw.get("version")
        if found_version != CACHE.version:
            logging.warning(
                f"[CACHE] Version mismatch (found {found_version}, expected {CACHE.version}), "
                "ignoring cache"
            )
            return cls()

        try:
            entries = _parse_entries(raw.get("entries"))
        except ValueError as e:
            logging.warning(f"[CACHE] Failed to load cache {p}: {e}")
            return cls()

        logging.info(f"[CACHE] Loaded {len(entries)} entries from cache")
        return cls(entries)

    def save(self, path: str | Path) -> None:
        fetched_at = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        entries = [
            {
                "gameName": name,
                "genres": list(e.genres),
                "releaseYear": e.release_year,
                "isMultiplayer": e.is_multiplayer,
                "outcome": e.outcome,
                "fetchedAt": fetched_at,
            }
            for name, e in self._entries.items()
        ]
        save_json({"version": CACHE.version, "entries": entries}, path)
        logging.info(f"[CACHE] Saved {len(entries)} entries to cache")


def _parse_entries(raw: Any) -> dict[str, Enrichment]:
    if not isinstance(raw, list):
        raise ValueError("'entries' must be a list")

    out: dict[str, Enrichment] = {}
    for item in raw:
        if not isinstance(item, dict):
            raise ValueError(f"cache entry is not an object: {item!r}")
        name = item.get("gameName")
        if not isinstance(name, str) or not name:
            raise ValueError(f"cache entry without gameName: {item!r}")

        genres = item.get("genres") or []
        if not isinstance(genres, list):
            raise ValueError(f"genres must be a list for {name!r}")

        year = item.get("releaseYear")
        if year is not None and (isinstance(year, bool) or not isinstance(year, int)):
            raise ValueError(f"releaseYear must be an integer or null for {name!r}")

        multiplayer = item.get("isMultiplayer", False)
        if not isinstance(multiplayer, bool):
            raise ValueError(f"isMultiplayer must be a boolean for {name!r}")

        outcome = item.get("outcome") or OUTCOME_UNKNOWN
        if outcome not in OUTCOMES:
            outcome = OUTCOME_UNKNOWN

        out[name] = Enrichment(
            genres=tuple(str(g) for g in genres),
            release_year=year,
            is_multiplayer=multiplayer,
            outcome=outcome,
        )
    return out
