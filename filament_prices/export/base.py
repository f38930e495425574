from __future__ import annotations

from typing import Protocol

from ..models import Snapshot


class Exporter(Protocol):
    def export(self, snapshot: Snapshot, path: str) -> None:
        ...
