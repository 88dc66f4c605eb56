from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from .schema import (
    ARTIFACT_GENRES,
    ARTIFACT_MULTIPLAYER,
    ARTIFACT_RELEASE_YEAR,
    EMULATOR_COL,
    NAME_COL,
    PLATFORM_COL,
    STATUS_COL,
    TOOL_COL,
    parse_bool,
)

OUTCOME_FOUND = "found"
OUTCOME_NOT_FOUND = "not_found"
OUTCOME_ERROR = "error"
# Entries written before outcomes were tracked.
OUTCOME_UNKNOWN = "unknown"

OUTCOMES = (OUTCOME_FOUND, OUTCOME_NOT_FOUND, OUTCOME_ERROR, OUTCOME_UNKNOWN)


@dataclass(frozen=True)
class Enrichment:
    """
    Metadata fetched for one game name.

    A lookup that failed and a lookup that found nothing both produce the empty value; `outcome`
    records which one happened so an operator can prune failures from the cache later.
    """

    genres: tuple[str, ...] = ()
    release_year: int | None = None
    is_multiplayer: bool = False
    outcome: str = OUTCOME_FOUND

    @staticmethod
    def empty(outcome: str = OUTCOME_NOT_FOUND) -> Enrichment:
        return Enrichment(genres=(), release_year=None, is_multiplayer=False, outcome=outcome)


@dataclass
class GameRecord:
    name: str
    status: str = ""
    platform: str = ""
    emulator: str = ""
    is_tool: bool = False
    genres: list[str] = field(default_factory=list)
    release_year: int | None = None
    is_multiplayer: bool = False

    def with_enrichment(self, enrichment: Enrichment) -> GameRecord:
        return replace(
            self,
            genres=list(enrichment.genres),
            release_year=enrichment.release_year,
            is_multiplayer=bool(enrichment.is_multiplayer),
        )

    def to_artifact_dict(self) -> dict[str, Any]:
        return {
            NAME_COL: self.name,
            STATUS_COL: self.status,
            PLATFORM_COL: self.platform,
            EMULATOR_COL: self.emulator,
            TOOL_COL: self.is_tool,
            ARTIFACT_GENRES: list(self.genres),
            ARTIFACT_RELEASE_YEAR: self.release_year,
            ARTIFACT_MULTIPLAYER: self.is_multiplayer,
        }

    @staticmethod
    def from_artifact_dict(obj: dict[str, Any]) -> GameRecord:
        year = obj.get(ARTIFACT_RELEASE_YEAR)
        genres = obj.get(ARTIFACT_GENRES)
        tool = obj.get(TOOL_COL)
        return GameRecord(
            name=str(obj.get(NAME_COL) or ""),
            status=str(obj.get(STATUS_COL) or ""),
            platform=str(obj.get(PLATFORM_COL) or ""),
            emulator=str(obj.get(EMULATOR_COL) or ""),
            # Older artifacts stored the flag as a "true"/"false" string.
            is_tool=tool if isinstance(tool, bool) else parse_bool(tool),
            genres=[str(g) for g in genres] if isinstance(genres, list) else [],
            release_year=year if isinstance(year, int) and not isinstance(year, bool) else None,
            is_multiplayer=bool(obj.get(ARTIFACT_MULTIPLAYER) or False),
        )


@dataclass(frozen=True)
class ParseError:
    row: int
    message: str
    field: str | None = None


@dataclass
class ParseResult:
    records: list[GameRecord] = field(default_factory=list)
    errors: list[ParseError] = field(default_factory=list)
