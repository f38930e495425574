from __future__ import annotations

import re
from typing import List, Optional

from ..models import EMPTY_OBSERVATION, PriceObservation
from .base import (
    META_CURRENCY_NAMES,
    META_PRICE_NAMES,
    price_from_meta,
    price_from_structured_blocks,
    price_from_text,
)

_LD_JSON_BLOCK = re.compile(
    r"<script[^>]*type=[\"']application/ld\+json[\"'][^>]*>([\s\S]*?)</script>",
    re.IGNORECASE,
)


def _meta_pattern(name: str) -> re.Pattern[str]:
    return re.compile(
        rf"<meta[^>]+(?:property|name)=\"{re.escape(name)}\"[^>]+content=\"([^\"]+)\"[^>]*>",
        re.IGNORECASE,
    )


_META_PATTERNS = {name: _meta_pattern(name) for name in META_PRICE_NAMES + META_CURRENCY_NAMES}


class RegexPriceExtractor:
    """
    Default extractor. Scans markup with fixed patterns instead of parsing it,
    so broken HTML never gets in the way. Tries JSON-LD, then meta tags,
    then a "price ... $12.34" text heuristic.
    """

    name = "regex"

    def extract(self, markup: str) -> PriceObservation:
        found = price_from_structured_blocks(self._ld_json_blocks(markup))
        if found is not None:
            return found
        found = price_from_meta(
            self._first_meta(markup, META_PRICE_NAMES),
            self._first_meta(markup, META_CURRENCY_NAMES),
        )
        if found is not None:
            return found
        return price_from_text(markup) or EMPTY_OBSERVATION

    def _ld_json_blocks(self, markup: str) -> List[str]:
        return [m.group(1) for m in _LD_JSON_BLOCK.finditer(markup)]

    def _first_meta(self, markup: str, names: tuple[str, ...]) -> Optional[str]:
        for name in names:
            match = _META_PATTERNS[name].search(markup)
            if match:
                return match.group(1)
        return None
