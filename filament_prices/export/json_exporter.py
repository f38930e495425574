from __future__ import annotations

from pathlib import Path

from ..models import Snapshot


class JSONExporter:
    """Writes the snapshot in the same document shape the API serves."""

    def export(self, snapshot: Snapshot, path: str) -> None:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(snapshot.to_json(indent=2))
            f.write("\n")
