"""API clients for game metadata sources."""

from .rawg_client import RAWGClient

__all__ = [
    "RAWGClient",
]
