"""Filament price tracker: scrape vendor pages, keep the latest snapshot, serve it."""

from .version import __version__

__all__ = ["__version__"]
