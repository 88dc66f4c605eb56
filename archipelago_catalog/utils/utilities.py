from __future__ import annotations

import json
import logging
import os
import random
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

import pandas as pd
import requests
import yaml

from ..config import RETRY

# ----------------------------
# Paths / Folder structure
# ----------------------------


@dataclass(frozen=True)
class ProjectPaths:
    root: Path
    data_dir: Path
    source_csv: Path
    cache_path: Path
    output_json: Path
    logs_dir: Path
    credentials: Path

    @staticmethod
    def from_root(root: str | Path) -> ProjectPaths:
        rootp = Path(root).resolve()
        return ProjectPaths.from_data_dir(rootp / "data", root=rootp)

    @staticmethod
    def from_data_dir(data_dir: str | Path, *, root: Path | None = None) -> ProjectPaths:
        data = Path(data_dir).resolve()
        return ProjectPaths(
            root=root or data.parent,
            data_dir=data,
            source_csv=data / "Archipelago_Master_Game_List.csv",
            cache_path=data / "enrichment-cache.json",
            output_json=data / "output" / "games-data.json",
            logs_dir=data / "logs",
            credentials=data / "credentials.yaml",
        )

    def ensure(self) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.logs_dir.mkdir(parents=True, exist_ok=True)
        self.output_json.parent.mkdir(parents=True, exist_ok=True)


# ----------------------------
# CSV Helpers
# ----------------------------


def read_csv(path: str | Path) -> pd.DataFrame:
    """Read CSV preserving strings and avoiding problematic type inference."""
    return pd.read_csv(path, dtype=str, keep_default_na=False)


def write_csv(df: pd.DataFrame, path: str | Path) -> None:
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)


# ----------------------------
# JSON files
# ----------------------------


def load_json(path: str | Path) -> Any:
    """
    Load a JSON document, returning None when the file is missing or not valid JSON.
    """
    p = Path(path)
    if not p.exists():
        return None
    try:
        return json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logging.warning(f"Could not read JSON from {p}: {e}")
        return None


def save_json(obj: Any, path: str | Path) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(obj, ensure_ascii=False, indent=2), encoding="utf-8")


# ----------------------------
# Rate limiting + retries
# ----------------------------


class RateLimiter:
    """
    Simple rate limiter: enforces minimum interval between requests.
    """

    def __init__(self, min_interval_s: float = 1.0):
        self.min_interval_s = float(min_interval_s)
        self._last = 0.0

    def wait(self) -> None:
        # Use monotonic time to avoid issues if the system clock changes.
        now = time.monotonic()
        delta = now - self._last
        if delta < self.min_interval_s:
            time.sleep(self.min_interval_s - delta)
        self._last = time.monotonic()


_NETWORK_ERRORS = (
    requests.exceptions.ConnectionError,
    requests.exceptions.Timeout,
    requests.exceptions.SSLError,
)


def _bump(stats: dict[str, Any] | None, key: str, amount: int = 1) -> None:
    if stats is None:
        return
    stats[key] = int(stats.get(key, 0) or 0) + amount


def with_retries(
    fn: Callable[[], Any],
    *,
    retries: int = RETRY.retries,
    base_sleep_s: float = RETRY.base_sleep_s,
    jitter_s: float = RETRY.jitter_s,
    retry_on: tuple[type, ...] = (Exception,),
    on_fail_return: Any = None,
    context: str | None = None,
    retry_stats: dict[str, Any] | None = None,
) -> Any:
    """
    Execute fn with retries and exponential backoff.

    After the last failed attempt the error is logged and `on_fail_return` is returned; callers
    treat that as a soft failure.
    """
    for attempt in range(retries):
        try:
            return fn()
        except retry_on as e:
            retry_after_s: float | None = None
            is_429 = False
            is_network = isinstance(e, _NETWORK_ERRORS)
            is_http = isinstance(e, requests.exceptions.HTTPError)
            if is_http:
                resp = getattr(e, "response", None)
                if getattr(resp, "status_code", None) == 429:
                    is_429 = True
                    headers = getattr(resp, "headers", {}) or {}
                    try:
                        ra = str(headers.get("Retry-After", "") or "").strip()
                        retry_after_s = float(ra) if ra else None
                    except ValueError:
                        retry_after_s = None
                    if retry_after_s is None:
                        retry_after_s = RETRY.http_429_default_retry_after_s

            if is_429:
                _bump(retry_stats, "http_429")
            if is_network:
                _bump(retry_stats, "network_errors")
            if is_http:
                _bump(retry_stats, "http_errors")

            if attempt == retries - 1:
                if context:
                    # Keep offline situations distinct from provider "not found" cases in logs.
                    if is_network:
                        tag = "NETWORK"
                    elif is_http:
                        tag = "HTTP"
                    else:
                        tag = "REQUEST"
                    logging.error(f"[{tag}] {context}: {type(e).__name__}: {e}")
                return on_fail_return
            sleep = base_sleep_s * (2**attempt) + random.uniform(0, jitter_s)
            if retry_after_s is not None and retry_after_s > 0:
                sleep = max(sleep, retry_after_s)
            _bump(retry_stats, "retry_attempts")
            time.sleep(sleep)
    return on_fail_return


# ----------------------------
# Credentials loading
# ----------------------------


def load_credentials(credentials_path: str | Path) -> dict[str, Any]:
    """
    Load credentials from a YAML file.

    Expected shape: {'rawg': {'api_key': '...'}}. A missing file yields an empty mapping so that
    the key can come from the environment instead.
    """
    p = Path(credentials_path)
    if not p.exists():
        return {}
    with open(p, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Credentials file must contain a mapping: {p}")
    return data


def resolve_rawg_api_key(credentials_path: str | Path) -> str:
    """
    RAWG API key from $RAWG_API_KEY, falling back to the credentials file.
    """
    env_key = os.environ.get("RAWG_API_KEY", "").strip()
    if env_key:
        return env_key
    rawg = load_credentials(credentials_path).get("rawg") or {}
    if not isinstance(rawg, dict):
        return ""
    return str(rawg.get("api_key") or "").strip()
