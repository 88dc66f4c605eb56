from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any

import requests

from ..config import REQUEST, RETRY
from ..utils.utilities import RateLimiter, with_retries


@dataclass
class HTTPJSONClient:
    """
    Small helper to standardize request + retry + rate limiting + stats counting.

    Provider clients pass in their own `requests.Session`, `stats` dict and rate limiter.
    """

    session: requests.Session
    stats: dict[str, Any] | None = None
    ratelimiter: RateLimiter | None = None
    timeout_s: float = REQUEST.timeout_s
    retries: int = RETRY.retries
    base_sleep_s: float = RETRY.base_sleep_s
    context_prefix: str | None = None

    def _bump(self, key: str) -> None:
        if self.stats is None:
            return
        self.stats[key] = int(self.stats.get(key, 0) or 0) + 1

    def _bump_ms(self, key: str, elapsed_ms: int) -> None:
        if self.stats is None:
            return
        ms_key = f"{key}_ms"
        self.stats[ms_key] = int(self.stats.get(ms_key, 0) or 0) + int(elapsed_ms)

    def _ctx(self, context: str) -> str:
        prefix = self.context_prefix
        if prefix:
            return f"{prefix}{': ' if context else ''}{context}"
        return context

    def get_json(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        counter_key: str = "http_get",
        context: str = "",
        on_fail_return: Any = None,
    ) -> Any:
        """
        GET a JSON document. Returns `on_fail_return` once every attempt has failed (HTTP error
        status, network error or a body that is not JSON).
        """

        def _request() -> Any:
            if self.ratelimiter is not None:
                self.ratelimiter.wait()
            self._bump(counter_key)
            kwargs: dict[str, Any] = {"timeout": self.timeout_s}
            if params is not None:
                kwargs["params"] = params
            t0 = time.perf_counter()
            r = self.session.get(url, **kwargs)
            t1 = time.perf_counter()
            self._bump_ms(counter_key, int(round((t1 - t0) * 1000.0)))
            r.raise_for_status()
            return r.json()

        return with_retries(
            _request,
            retries=self.retries,
            base_sleep_s=self.base_sleep_s,
            on_fail_return=on_fail_return,
            context=self._ctx(context),
            retry_stats=self.stats,
        )
