from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RetryConfig:
    retries: int = 2
    base_sleep_s: float = 1.0
    jitter_s: float = 0.3
    http_429_default_retry_after_s: float = 5.0


@dataclass(frozen=True)
class RequestConfig:
    timeout_s: int = 10


@dataclass(frozen=True)
class RAWGConfig:
    api_url: str = "https://api.rawg.io/api/games"
    # RAWG's free tier throttles aggressively; keep a little above one request per second.
    min_interval_s: float = 1.1
    page_size: int = 1


@dataclass(frozen=True)
class CacheConfig:
    # Bump when the entry shape changes; older files are discarded, not migrated.
    version: str = "1.0.0"


@dataclass(frozen=True)
class DatasetConfig:
    schema_version: str = "1.0.0"


@dataclass(frozen=True)
class CLIConfig:
    cache_progress_every_n: int = 50
    api_progress_every_n: int = 10
    max_logged_parse_errors: int = 5


RETRY = RetryConfig()
REQUEST = RequestConfig()
RAWG = RAWGConfig()
CACHE = CacheConfig()
DATASET = DatasetConfig()
CLI = CLIConfig()
