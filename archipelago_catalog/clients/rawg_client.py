from __future__ import annotations

import logging
from typing import Any

import requests

from ..config import RAWG, REQUEST, RETRY
from ..models import OUTCOME_ERROR, OUTCOME_FOUND, OUTCOME_NOT_FOUND, Enrichment
from ..utils.utilities import RateLimiter
from .http_client import HTTPJSONClient
from .parse import as_str, get_list_of_dicts, names_of, year_from_iso_date

MULTIPLAYER_KEYWORDS = ("multiplayer", "co-op", "online", "local multiplayer", "split screen")

_REQUEST_FAILED = object()


class RAWGClient:
    """
    Look up games on RAWG by name and reduce the top search result to an `Enrichment`.

    Lookups never raise for HTTP, network or payload problems: they log and return the empty
    enrichment tagged with outcome "error".
    """

    def __init__(
        self,
        api_key: str,
        min_interval_s: float = RAWG.min_interval_s,
        retries: int = RETRY.retries,
        timeout_s: float = REQUEST.timeout_s,
        api_url: str = RAWG.api_url,
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.stats: dict[str, int] = {
            "found": 0,
            "not_found": 0,
            "api_errors": 0,
            "invalid_responses": 0,
            "request_failures": 0,
            # HTTP request counters (attempts, including retries).
            "http_get": 0,
        }
        self._session = requests.Session()
        # Owned per instance: two clients never share a request clock.
        self.ratelimiter = RateLimiter(min_interval_s=min_interval_s)
        self._http = HTTPJSONClient(
            self._session,
            stats=self.stats,
            ratelimiter=self.ratelimiter,
            timeout_s=timeout_s,
            retries=retries,
            context_prefix="RAWG",
        )

    def search(self, game_name: str) -> tuple[dict[str, Any] | None, str]:
        """
        Return (top result or None, outcome) for a free-text search.
        """
        data = self._http.get_json(
            self.api_url,
            params={"key": self.api_key, "search": game_name, "page_size": RAWG.page_size},
            context=f"search term={game_name!r}",
            on_fail_return=_REQUEST_FAILED,
        )
        if data is _REQUEST_FAILED:
            self.stats["request_failures"] += 1
            logging.warning(f"[RAWG] Request failed for '{game_name}'")
            return None, OUTCOME_ERROR

        if isinstance(data, dict) and isinstance(data.get("error"), str):
            self.stats["api_errors"] += 1
            logging.warning(f"[RAWG] API error for '{game_name}': {data['error']}")
            return None, OUTCOME_ERROR

        if not isinstance(data, dict) or not isinstance(data.get("results"), list):
            self.stats["invalid_responses"] += 1
            logging.warning(f"[RAWG] Invalid response format for '{game_name}'")
            return None, OUTCOME_ERROR

        results = get_list_of_dicts(data["results"])
        if not results:
            self.stats["not_found"] += 1
            logging.info(f"[RAWG] Not found: '{game_name}'")
            return None, OUTCOME_NOT_FOUND

        self.stats["found"] += 1
        return results[0], OUTCOME_FOUND

    def enrich(self, game_name: str) -> Enrichment:
        result, outcome = self.search(game_name)
        if result is None:
            return Enrichment.empty(outcome)
        return self.extract_enrichment(result)

    # ----------------------------
    # Metadata extraction
    # ----------------------------
    @staticmethod
    def extract_enrichment(rawg_obj: dict[str, Any]) -> Enrichment:
        return Enrichment(
            genres=tuple(names_of(rawg_obj.get("genres"))),
            release_year=year_from_iso_date(rawg_obj.get("released")),
            is_multiplayer=has_multiplayer_tag(rawg_obj.get("tags")),
            outcome=OUTCOME_FOUND,
        )

    def format_stats(self) -> str:
        s = self.stats
        base = (
            f"found={s['found']} not_found={s['not_found']} "
            f"api_errors={s['api_errors']} invalid={s['invalid_responses']} "
            f"failed={s['request_failures']} http_get={s['http_get']}"
        )
        retries = int(s.get("retry_attempts", 0) or 0)
        if retries:
            base += f" retries={retries}"
        http_429 = int(s.get("http_429", 0) or 0)
        if http_429:
            base += f" 429={http_429}"
        return base


def has_multiplayer_tag(tags: Any) -> bool:
    for tag in get_list_of_dicts(tags):
        name = as_str(tag.get("name")).lower()
        if any(k in name for k in MULTIPLAYER_KEYWORDS):
            return True
    return False
