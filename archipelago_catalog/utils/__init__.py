"""
Utility functions and helpers.

This module intentionally uses lazy attribute loading to avoid importing heavier
submodules (e.g., pandas) unless they are needed.
"""

from __future__ import annotations

from typing import Any

__all__ = [
    "EveryN",
    "ProjectPaths",
    "RateLimiter",
    "load_credentials",
    "load_json",
    "read_csv",
    "resolve_rawg_api_key",
    "save_json",
    "with_retries",
    "write_csv",
]


def __getattr__(name: str) -> Any:  # pragma: no cover
    if name == "EveryN":
        from .progress import EveryN

        return EveryN

    if name in __all__:
        from . import utilities as _u

        return getattr(_u, name)

    raise AttributeError(name)
