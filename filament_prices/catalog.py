from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple


@dataclass(frozen=True)
class CatalogEntry:
    """A tracked filament SKU. Static input; rows are built on top of it."""

    brand: str
    material: str
    product: str
    url: str
    weight_kg: float
    abrasive: bool = False  # CF/GF/glow/etc. wear standard nozzles

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "brand": self.brand,
            "material": self.material,
            "product": self.product,
            "url": self.url,
            "weightKg": self.weight_kg,
        }
        if self.abrasive:
            data["abrasive"] = True
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CatalogEntry":
        return cls(
            brand=data["brand"],
            material=data["material"],
            product=data["product"],
            url=data["url"],
            weight_kg=float(data["weightKg"]),
            abrasive=bool(data.get("abrasive", False)),
        )


_BAMBU = "https://us.store.bambulab.com/products"
_POLYMAKER = "https://us.polymaker.com/products"
_MH = "https://www.matterhackers.com/store"
_SUNLU = "https://www.sunlu.com"

PRODUCTS: Tuple[CatalogEntry, ...] = (
    # --- Bambu Lab (official US store) ---
    CatalogEntry("Bambu Lab", "PLA", "PLA Basic", f"{_BAMBU}/pla-basic", 1.0),
    CatalogEntry("Bambu Lab", "PETG", "PETG HF", f"{_BAMBU}/petg-hf", 1.0),
    CatalogEntry("Bambu Lab", "ABS", "ABS", f"{_BAMBU}/abs-filament", 1.0),
    CatalogEntry("Bambu Lab", "ASA", "ASA", f"{_BAMBU}/asa-filament", 1.0),
    CatalogEntry("Bambu Lab", "TPU", "TPU 95A HF", f"{_BAMBU}/tpu-95a-hf", 1.0),
    CatalogEntry("Bambu Lab", "PC", "PC Basic", f"{_BAMBU}/pc-filament", 1.0),
    CatalogEntry("Bambu Lab", "PVA", "PVA (Support)", f"{_BAMBU}/pva", 0.5),
    CatalogEntry("Bambu Lab", "PETG-CF", "PETG-CF", f"{_BAMBU}/petg-cf", 1.0, abrasive=True),
    CatalogEntry("Bambu Lab", "PA-CF", "PA6-CF", f"{_BAMBU}/pa6-cf", 1.0, abrasive=True),
    # --- Polymaker (official US) ---
    CatalogEntry("Polymaker", "PLA", "PolyLite PLA", f"{_POLYMAKER}/polylite-pla", 1.0),
    CatalogEntry("Polymaker", "PETG", "PolyLite PETG", f"{_POLYMAKER}/polylite-translucent-petg", 1.0),
    CatalogEntry("Polymaker", "ABS", "PolyLite ABS", f"{_POLYMAKER}/polylite-abs", 1.0),
    CatalogEntry("Polymaker", "ASA", "PolyLite ASA", f"{_POLYMAKER}/polylite-asa", 1.0),
    CatalogEntry("Polymaker", "TPU", "PolyFlex TPU95-HF", f"{_POLYMAKER}/polyflex-tpu95-hf", 1.0),
    CatalogEntry("Polymaker", "PC", "PolyLite PC", f"{_POLYMAKER}/polylite-pc", 1.0),
    CatalogEntry("Polymaker", "PA", "PolyMide CoPA (0.75kg)", f"{_POLYMAKER}/polymide-copa", 0.75),
    # --- MatterHackers (house brand) ---
    CatalogEntry(
        "MatterHackers", "PLA", "MH Build Series PLA",
        f"{_MH}/3d-printer-filament/175mm-pla-filament-black-1-kg", 1.0,
    ),
    CatalogEntry("MatterHackers", "PETG", "MH Build Series PETG", f"{_MH}/c/mh-build-series-petg", 1.0),
    CatalogEntry("MatterHackers", "ABS", "MH Build Series ABS", f"{_MH}/c/mh-build-series-abs", 1.0),
    CatalogEntry("MatterHackers", "ASA", "MH Build Series ASA", f"{_MH}/c/mh-build-series-asa", 1.0),
    CatalogEntry("MatterHackers", "TPU", "MH Build Series TPU", f"{_MH}/c/mh-build-series-tpu", 1.0),
    CatalogEntry("MatterHackers", "PA", "MH Build Series Nylon", f"{_MH}/c/mh-build-series-nylon", 1.0),
    # --- SUNLU (official) ---
    CatalogEntry("SUNLU", "PLA", "PLA 1kg", f"{_SUNLU}/collections/all-products", 1.0),
    CatalogEntry("SUNLU", "PETG", "PETG 1kg", f"{_SUNLU}/collections/petg", 1.0),
    CatalogEntry("SUNLU", "ABS", "ABS 1kg", f"{_SUNLU}/collections/abs", 1.0),
    CatalogEntry("SUNLU", "ASA", "ASA 1kg", f"{_SUNLU}/products/sunlu-asa-filament-1-75mm", 1.0),
    CatalogEntry(
        "SUNLU", "TPU", "TPU 1kg",
        f"{_SUNLU}/collections/filaments/products/sunlu-tpu-filament-1-75mm", 1.0,
    ),
)


def load_catalog(path: str | os.PathLike[str] | None = None) -> Tuple[CatalogEntry, ...]:
    """
    Return the built-in catalog, or the one stored as a JSON array at ``path``.
    Entries use the same camelCase keys as snapshot rows.
    """
    if path is None:
        return PRODUCTS
    with open(path, "r", encoding="utf-8") as f:
        raw: List[Dict[str, Any]] = json.load(f)
    if not isinstance(raw, list):
        raise ValueError(f"Catalog file {path} must contain a JSON array")
    return tuple(CatalogEntry.from_dict(item) for item in raw)
