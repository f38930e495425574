from __future__ import annotations

import csv
from pathlib import Path

from ..models import Snapshot
from ..utils.timeutil import to_iso


class CSVExporter:
    """
    One line per row, in catalog order, with the per-kilogram price worked out.
    Missing prices are written as empty cells.
    """

    _headers = [
        "brand",
        "material",
        "product",
        "url",
        "weight_kg",
        "abrasive",
        "price",
        "currency",
        "price_per_kg",
        "scraped_at",
    ]

    def export(self, snapshot: Snapshot, path: str) -> None:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="") as f:
            w = csv.writer(f)
            w.writerow(self._headers)
            for row in snapshot.rows:
                per_kg = row.price_per_kg
                w.writerow(
                    [
                        row.entry.brand,
                        row.entry.material,
                        row.entry.product,
                        row.entry.url,
                        row.entry.weight_kg,
                        "yes" if row.entry.abrasive else "",
                        row.price if row.price is not None else "",
                        row.currency or "",
                        f"{per_kg:.2f}" if per_kg is not None else "",
                        to_iso(row.scraped_at) if row.scraped_at else "",
                    ]
                )
