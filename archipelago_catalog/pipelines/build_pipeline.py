from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from ..cache import EnrichmentCache
from ..dataset import load_metadata, write_dataset
from ..models import ParseError
from ..source import file_hash, read_source
from .enrich_pipeline import EnrichmentSource, EnrichStats, enrich_records


@dataclass
class BuildResult:
    skipped: bool
    source_hash: str
    output_json: Path
    parsed: int = 0
    parse_errors: list[ParseError] = field(default_factory=list)
    enrich_stats: EnrichStats | None = None


def run_build(
    *,
    source_csv: Path,
    output_json: Path,
    cache_path: Path,
    client: EnrichmentSource | None,
    enrich: bool = True,
    force: bool = False,
) -> BuildResult:
    """
    Rebuild the games dataset unless the source CSV is unchanged since the last build.

    Raises FileNotFoundError for a missing source, ValueError when no rows survive parsing and
    RuntimeError when the dataset cannot be written.
    """
    if not source_csv.exists():
        raise FileNotFoundError(f"CSV file not found: {source_csv}")

    source_hash = file_hash(source_csv)
    logging.info(f"[BUILD] CSV hash: {source_hash}")

    existing = load_metadata(output_json)
    if existing and existing.get("csvHash") == source_hash and not force:
        logging.info("[BUILD] ✓ CSV unchanged, skipping regeneration")
        logging.info(f"[BUILD]   - Use existing data: {output_json}")
        return BuildResult(skipped=True, source_hash=source_hash, output_json=output_json)

    if existing:
        logging.info("[BUILD] CSV changed, regenerating games data...")
    else:
        logging.info("[BUILD] No existing games data, generating...")

    parsed = read_source(source_csv)
    if not parsed.records:
        raise ValueError("No games parsed from CSV. Check CSV format and content.")

    records = parsed.records
    stats: EnrichStats | None = None
    if enrich:
        if client is None:
            raise RuntimeError("Enrichment requested but no metadata client was configured.")
        logging.info("[BUILD] Starting RAWG enrichment...")
        cache = EnrichmentCache.load(cache_path)
        records, stats = enrich_records(records, cache=cache, client=client)
        cache.save(cache_path)
    else:
        logging.info("[BUILD] Enrichment disabled; writing base records only")

    write_dataset(output_json, records, source_hash=source_hash)

    result = BuildResult(
        skipped=False,
        source_hash=source_hash,
        output_json=output_json,
        parsed=len(records),
        parse_errors=list(parsed.errors),
        enrich_stats=stats,
    )
    _log_summary(result, with_genres=sum(1 for r in records if r.genres))
    return result


def _log_summary(result: BuildResult, *, with_genres: int) -> None:
    size_kb = result.output_json.stat().st_size / 1024
    logging.info("[BUILD] ✓ Build complete!")
    logging.info(f"[BUILD]   - Games parsed: {result.parsed}")
    logging.info(f"[BUILD]   - Games with genres: {with_genres}")
    logging.info(f"[BUILD]   - Parse errors: {len(result.parse_errors)}")
    if result.enrich_stats is not None:
        s = result.enrich_stats
        logging.info(f"[BUILD]   - Cache hits: {s.cache_hits}")
        logging.info(f"[BUILD]   - API calls: {s.api_calls}")
        logging.info(f"[BUILD]   - Not found: {s.not_found}")
    logging.info(f"[BUILD]   - Games output: {result.output_json}")
    logging.info(f"[BUILD]   - Games size: {size_kb:.2f} KB")
