from __future__ import annotations

from abc import ABC, abstractmethod

from ..models import Snapshot


class SnapshotEngine(ABC):
    """
    Abstract engine interface. Implementations own fetching and assembling one snapshot.
    """
    @abstractmethod
    async def build(self) -> Snapshot:  # pragma: no cover - interface
        ...
