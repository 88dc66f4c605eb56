"""
Filter semantics of the games directory, applied to an in-memory list of records.

The site filters client-side; this module mirrors those rules so the dataset can be queried
from the command line and the rules can be tested without a browser.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence

from .models import GameRecord

TOOLS_INCLUDE = "include"
TOOLS_EXCLUDE = "exclude"
TOOLS_ONLY = "only"
TOOLS_MODES = (TOOLS_INCLUDE, TOOLS_EXCLUDE, TOOLS_ONLY)


@dataclass
class GameFilters:
    query: str = ""
    status: list[str] = field(default_factory=list)
    platform: list[str] = field(default_factory=list)
    emulator: list[str] = field(default_factory=list)
    genre: list[str] = field(default_factory=list)
    letter: str | None = None
    tools: str = TOOLS_INCLUDE

    def is_empty(self) -> bool:
        return (
            not self.query.strip()
            and not (self.status or self.platform or self.emulator or self.genre)
            and not self.letter
            and self.tools == TOOLS_INCLUDE
        )


def split_values(raw: str | None) -> list[str]:
    """Comma-separated selection ("Official,Stable") to a list, dropping empty items."""
    if not raw:
        return []
    return [v.strip() for v in raw.split(",") if v.strip()]


def _matches_query(record: GameRecord, query: str) -> bool:
    return any(
        query in value.lower()
        for value in (record.name, record.status, record.platform, record.emulator)
    )


def filter_games(records: Sequence[GameRecord], filters: GameFilters) -> list[GameRecord]:
    """
    Records matching every active filter, in their original order.

    Multi-select filters match any selected value; distinct filters combine with AND.
    """
    if filters.tools not in TOOLS_MODES:
        raise ValueError(f"Unknown tools mode: {filters.tools!r} (expected one of {TOOLS_MODES})")

    results: Iterable[GameRecord] = records

    query = filters.query.strip().lower()
    if query:
        results = [r for r in results if _matches_query(r, query)]

    if filters.status:
        results = [r for r in results if r.status in filters.status]
    if filters.platform:
        results = [r for r in results if r.platform in filters.platform]
    if filters.emulator:
        results = [r for r in results if r.emulator in filters.emulator]
    if filters.genre:
        wanted = set(filters.genre)
        results = [r for r in results if wanted.intersection(r.genres)]

    if filters.letter:
        letter = filters.letter.strip()[:1].casefold()
        results = [r for r in results if r.name[:1].casefold() == letter]

    if filters.tools == TOOLS_EXCLUDE:
        results = [r for r in results if not r.is_tool]
    elif filters.tools == TOOLS_ONLY:
        results = [r for r in results if r.is_tool]

    return list(results)


def filter_options(records: Sequence[GameRecord]) -> dict[str, list[str]]:
    """Sorted, distinct, non-empty values available for each multi-select filter."""
    statuses: set[str] = set()
    platforms: set[str] = set()
    emulators: set[str] = set()
    genres: set[str] = set()
    for r in records:
        if r.status:
            statuses.add(r.status)
        if r.platform:
            platforms.add(r.platform)
        if r.emulator:
            emulators.add(r.emulator)
        genres.update(g for g in r.genres if g)
    return {
        "status": sorted(statuses),
        "platform": sorted(platforms),
        "emulator": sorted(emulators),
        "genre": sorted(genres),
    }
