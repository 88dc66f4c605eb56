"""Archipelago Catalog Builder - Build the enriched games dataset for the Archipelago directory."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("archipelago-catalog-builder")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.1.0"
