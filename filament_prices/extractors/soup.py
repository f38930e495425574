from __future__ import annotations

from typing import List, Optional

from bs4 import BeautifulSoup

from ..models import EMPTY_OBSERVATION, PriceObservation
from .base import (
    META_CURRENCY_NAMES,
    META_PRICE_NAMES,
    price_from_meta,
    price_from_structured_blocks,
    price_from_text,
)


class SoupPriceExtractor:
    """
    Same strategy order as the regex extractor, but locates script and meta
    elements through BeautifulSoup, so attribute order and quoting don't matter.
    Select it with ``TRACKER_EXTRACTOR=filament_prices.extractors.soup:SoupPriceExtractor``.
    """

    name = "soup"

    def __init__(self, parser: str = "html.parser") -> None:
        self.parser = parser

    def extract(self, markup: str) -> PriceObservation:
        soup = BeautifulSoup(markup, self.parser)
        found = price_from_structured_blocks(self._ld_json_blocks(soup))
        if found is not None:
            return found
        found = price_from_meta(
            self._first_meta(soup, META_PRICE_NAMES),
            self._first_meta(soup, META_CURRENCY_NAMES),
        )
        if found is not None:
            return found
        return price_from_text(markup) or EMPTY_OBSERVATION

    def _ld_json_blocks(self, soup: BeautifulSoup) -> List[str]:
        scripts = soup.find_all(
            "script", attrs={"type": lambda t: bool(t) and t.lower() == "application/ld+json"}
        )
        return [s.string or s.get_text() for s in scripts]

    def _first_meta(self, soup: BeautifulSoup, names: tuple[str, ...]) -> Optional[str]:
        for name in names:
            for attr in ("property", "name"):
                tag = soup.find("meta", attrs={attr: name})
                if tag is not None and tag.get("content"):
                    return tag.get("content")
        return None
