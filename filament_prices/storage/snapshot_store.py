from __future__ import annotations

import logging
from typing import Optional

from ..config import SNAPSHOT_TTL_SECONDS, TrackerConfig
from ..models import Snapshot
from .base import KeyValueStore
from .memory import MemoryKeyValueStore
from .sqlite import SqliteKeyValueStore

logger = logging.getLogger(__name__)

LATEST_KEY = "latest"


class SnapshotStore:
    """
    Holds at most one snapshot, under a single key, for a bounded time.
    ``get`` returns the whole snapshot or nothing; there is no stale state.
    """

    def __init__(
        self,
        kv: KeyValueStore,
        key: str = LATEST_KEY,
        ttl_seconds: float = SNAPSHOT_TTL_SECONDS,
    ) -> None:
        self.kv = kv
        self.key = key
        self.ttl_seconds = ttl_seconds

    def get(self) -> Optional[Snapshot]:
        text = self.kv.get(self.key)
        if text is None:
            return None
        return Snapshot.from_json(text)

    def put(self, snapshot: Snapshot) -> None:
        self.kv.put(self.key, snapshot.to_json(), self.ttl_seconds)
        logger.info("Stored snapshot of %d rows updated at %s", len(snapshot.rows), snapshot.to_dict()["updatedAt"])


def create_kv_store(cfg: TrackerConfig) -> KeyValueStore:
    if cfg.store_backend == "sqlite":
        return SqliteKeyValueStore(cfg.store_path)
    if cfg.store_backend == "memory":
        return MemoryKeyValueStore()
    raise ValueError(f"Unknown store backend: {cfg.store_backend!r}")


def create_snapshot_store(cfg: TrackerConfig) -> SnapshotStore:
    return SnapshotStore(create_kv_store(cfg), ttl_seconds=cfg.snapshot_ttl_seconds)
