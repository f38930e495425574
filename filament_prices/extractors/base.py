from __future__ import annotations

import json
import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Protocol

from ..models import EMPTY_OBSERVATION, PriceObservation

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "USD"

# Meta names tried in order for the amount and the currency.
META_PRICE_NAMES = ("product:price:amount", "og:price:amount", "twitter:data1")
META_CURRENCY_NAMES = ("product:price:currency", "og:price:currency")

_NUMERIC_LITERAL = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|[+-]?Infinity")
_NON_PRICE_CHARS = re.compile(r"[^0-9.]")
_PRICE_NEAR_DOLLAR = re.compile(r"price[^\n\r]{0,100}?\$\s*([0-9]+(?:\.[0-9]{2})?)", re.IGNORECASE)


class PriceExtractor(Protocol):
    """
    Turns raw page markup into a PriceObservation.
    Implementations never raise; an unreadable page yields the empty observation.
    """

    name: str

    def extract(self, markup: str) -> PriceObservation:
        ...


def to_number(value: Any) -> float:
    """
    Loose numeric coercion for values lifted out of vendor markup.
    Numbers pass through, blank strings are 0, anything else unparseable is NaN.
    """
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        if _NUMERIC_LITERAL.fullmatch(text):
            return float(text.replace("Infinity", "inf"))
    return math.nan


@dataclass(frozen=True)
class OfferCandidate:
    """The price-bearing fields of one JSON-LD object that may describe an offer."""

    price: Any = None
    price_currency: Any = None
    currency: Any = None
    spec_price: Any = None
    spec_currency: Any = None
    price_amount: Any = None

    @classmethod
    def from_mapping(cls, node: Mapping[str, Any]) -> "OfferCandidate":
        spec = node.get("priceSpecification")
        if not isinstance(spec, Mapping):
            spec = {}
        return cls(
            price=node.get("price"),
            price_currency=node.get("priceCurrency"),
            currency=node.get("currency"),
            spec_price=spec.get("price"),
            spec_currency=spec.get("priceCurrency"),
            price_amount=node.get("priceAmount"),
        )

    def normalize(self) -> PriceObservation:
        price = to_number(self.price or self.spec_price or self.price_amount)
        if not math.isfinite(price):
            return EMPTY_OBSERVATION
        currency = self.price_currency or self.currency or self.spec_currency or DEFAULT_CURRENCY
        return PriceObservation(price=price, currency=str(currency))


def _type_label(value: Any) -> str:
    if isinstance(value, list):
        return ",".join(_type_label(v) for v in value)
    if isinstance(value, Mapping) or value is None:
        return ""
    return str(value)


class OfferCandidateCollector:
    """
    Pre-order walk over a decoded JSON tree (object / array / scalar).

    Objects typed as a product contribute their ``offers`` (arrays flattened one
    level), and any object carrying ``price`` or ``priceCurrency`` is a candidate
    itself. Scalars contribute nothing. The walk keeps its own stack, so nesting
    depth is bounded only by what the JSON decoder accepts.
    """

    def __init__(self) -> None:
        self.candidates: List[OfferCandidate] = []

    def visit(self, root: Any) -> None:
        stack: List[Any] = [root]
        while stack:
            node = stack.pop()
            if isinstance(node, Mapping):
                self.visit_object(node)
                children = list(node.values())
            elif isinstance(node, list):
                children = node
            else:
                continue
            # Reversed so the first child is popped next.
            stack.extend(reversed(children))

    def visit_object(self, node: Mapping[str, Any]) -> None:
        if "product" in _type_label(node.get("@type")).lower():
            offers = node.get("offers")
            if offers:
                self._add(offers)
        if node.get("price") or node.get("priceCurrency"):
            self._add(node)

    def _add(self, value: Any) -> None:
        items = value if isinstance(value, list) else [value]
        for item in items:
            if isinstance(item, Mapping):
                self.candidates.append(OfferCandidate.from_mapping(item))


def collect_offer_candidates(tree: Any) -> List[OfferCandidate]:
    collector = OfferCandidateCollector()
    collector.visit(tree)
    return collector.candidates


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant {name}")


def _load_block(raw: str) -> Any:
    # Strict JSON: NaN and Infinity literals make the block malformed.
    return json.loads(raw.strip(), parse_constant=_reject_constant)


def price_from_structured_blocks(blocks: Iterable[str]) -> Optional[PriceObservation]:
    """First finite, non-zero price found across the given JSON-LD block bodies."""
    for raw in blocks:
        try:
            candidates = collect_offer_candidates(_load_block(raw))
        except (ValueError, RecursionError):
            logger.debug("Skipping malformed structured-data block (%d chars)", len(raw))
            continue
        for candidate in candidates:
            observation = candidate.normalize()
            if observation.price:
                return observation
    return None


def price_from_meta(price_content: Optional[str], currency_content: Optional[str]) -> Optional[PriceObservation]:
    if not price_content:
        return None
    price = to_number(_NON_PRICE_CHARS.sub("", price_content))
    return PriceObservation(
        price=price if math.isfinite(price) else None,
        currency=currency_content or DEFAULT_CURRENCY,
    )


def price_from_text(markup: str) -> Optional[PriceObservation]:
    # No currency detection here: a dollar amount is always reported as USD.
    match = _PRICE_NEAR_DOLLAR.search(markup)
    if not match:
        return None
    price = float(match.group(1))
    return PriceObservation(
        price=price if math.isfinite(price) else None,
        currency=DEFAULT_CURRENCY,
    )
