from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Sequence, Tuple

from .catalog import CatalogEntry
from .utils.timeutil import from_iso, to_iso


@dataclass(frozen=True)
class PriceObservation:
    """What an extractor could read off one page. A missing price is not an error."""

    price: Optional[float] = None
    currency: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.price is None and self.currency is None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.price is not None:
            data["price"] = self.price
        if self.currency is not None:
            data["currency"] = self.currency
        return data


EMPTY_OBSERVATION = PriceObservation()


@dataclass(frozen=True)
class Row:
    """One catalog entry with the price observed for it in one scrape."""

    entry: CatalogEntry
    price: Optional[float] = None
    currency: Optional[str] = None
    scraped_at: Optional[datetime] = None

    @classmethod
    def from_observation(
        cls, entry: CatalogEntry, observation: PriceObservation, scraped_at: datetime
    ) -> "Row":
        return cls(entry=entry, price=observation.price, currency=observation.currency, scraped_at=scraped_at)

    @property
    def price_per_kg(self) -> Optional[float]:
        if self.price is None or not self.entry.weight_kg:
            return None
        return self.price / self.entry.weight_kg

    def to_dict(self) -> Dict[str, Any]:
        data = self.entry.to_dict()
        if self.price is not None:
            data["price"] = self.price
        if self.currency is not None:
            data["currency"] = self.currency
        if self.scraped_at is not None:
            data["scrapedAt"] = to_iso(self.scraped_at)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Row":
        scraped = data.get("scrapedAt")
        price = data.get("price")
        return cls(
            entry=CatalogEntry.from_dict(data),
            price=float(price) if price is not None else None,
            currency=data.get("currency"),
            scraped_at=from_iso(scraped) if scraped else None,
        )


@dataclass(frozen=True)
class Snapshot:
    """One full scrape of the catalog. Replaced wholesale by the next one."""

    updated_at: datetime
    rows: Tuple[Row, ...]

    def __init__(self, updated_at: datetime, rows: Sequence[Row]) -> None:
        object.__setattr__(self, "updated_at", updated_at)
        object.__setattr__(self, "rows", tuple(rows))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "updatedAt": to_iso(self.updated_at),
            "rows": [r.to_dict() for r in self.rows],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Snapshot":
        return cls(
            updated_at=from_iso(data["updatedAt"]),
            rows=[Row.from_dict(r) for r in data.get("rows", [])],
        )

    def to_json(self, indent: Optional[int] = None) -> str:
        # Non-finite numbers raise instead of being written as bare NaN/Infinity.
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False, allow_nan=False)

    @classmethod
    def from_json(cls, text: str) -> "Snapshot":
        return cls.from_dict(json.loads(text))
