from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol, Sequence

from ..cache import EnrichmentCache
from ..config import CLI
from ..models import OUTCOME_ERROR, Enrichment, GameRecord
from ..utils.progress import EveryN


class EnrichmentSource(Protocol):
    def enrich(self, game_name: str) -> Enrichment: ...


@dataclass
class EnrichStats:
    cache_hits: int = 0
    api_calls: int = 0
    not_found: int = 0
    errors: int = 0
    with_genres: int = 0


def enrich_records(
    records: Sequence[GameRecord],
    *,
    cache: EnrichmentCache,
    client: EnrichmentSource,
    cache_progress_every: int = CLI.cache_progress_every_n,
    api_progress_every: int = CLI.api_progress_every_n,
) -> tuple[list[GameRecord], EnrichStats]:
    """
    Merge enrichment fields onto every record, consulting the cache before the client.

    Cache misses call the client exactly once and store whatever comes back, including empty
    results, so a name is never looked up twice. The caller persists the cache afterwards.
    Output order matches input order.
    """
    stats = EnrichStats()
    total = len(records)
    out: list[GameRecord] = []
    position = 0

    def _log_cache_progress() -> None:
        logging.info(
            f"[ENRICH] ({position}/{total}) Processed "
            f"({cache_progress.count} from cache, {api_progress.count} API calls)"
        )

    def _log_api_progress() -> None:
        logging.info(
            f"[ENRICH] ({position}/{total}) Fetched from API "
            f"({api_progress.count} calls, {stats.not_found} not found)"
        )

    cache_progress = EveryN(cache_progress_every, _log_cache_progress)
    api_progress = EveryN(api_progress_every, _log_api_progress)

    logging.info(f"[ENRICH] Starting enrichment for {total} games...")
    for position, record in enumerate(records, start=1):
        cached = cache.get(record.name)
        if cached is not None:
            out.append(record.with_enrichment(cached))
            stats.cache_hits = cache_progress.tick()
            continue

        try:
            enrichment = client.enrich(record.name)
        except Exception as e:
            # Store the empty value anyway so a name that breaks the client cannot stall every
            # future build.
            logging.warning(f"[ENRICH] Failed to enrich '{record.name}': {type(e).__name__}: {e}")
            enrichment = Enrichment.empty(OUTCOME_ERROR)
            stats.errors += 1
        else:
            if not enrichment.genres:
                stats.not_found += 1
            stats.api_calls = api_progress.tick()

        out.append(record.with_enrichment(enrichment))
        cache.set(record.name, enrichment)

    stats.with_genres = sum(1 for r in out if r.genres)
    logging.info("[ENRICH] Enrichment complete:")
    logging.info(f"[ENRICH]   - Cache hits: {stats.cache_hits}")
    logging.info(f"[ENRICH]   - API calls: {stats.api_calls}")
    logging.info(f"[ENRICH]   - Not found: {stats.not_found}")
    if stats.errors:
        logging.info(f"[ENRICH]   - Client errors: {stats.errors}")
    logging.info(f"[ENRICH]   - Total with genres: {stats.with_genres}")
    return out, stats
