"""Read, refresh and scheduled-refresh paths shared by the API, the CLI and the timer."""

from __future__ import annotations

import asyncio
import hmac
import logging
from typing import Optional

from .config import TrackerConfig
from .engines.base import SnapshotEngine
from .models import Snapshot
from .storage.snapshot_store import SnapshotStore, create_snapshot_store
from .utils.loader import load_symbol

logger = logging.getLogger(__name__)


class PriceTracker:
    def __init__(self, config: TrackerConfig, engine: SnapshotEngine, store: SnapshotStore) -> None:
        self.config = config
        self.engine = engine
        self.store = store

    @classmethod
    def from_config(cls, config: TrackerConfig) -> "PriceTracker":
        config.validate()
        engine_cls = load_symbol(config.engine)
        return cls(config, engine_cls(config), create_snapshot_store(config))

    async def latest_or_build(self) -> Snapshot:
        """Serve the stored snapshot; build and store one first if there is none."""
        snapshot = await asyncio.to_thread(self.store.get)
        if snapshot is not None:
            return snapshot
        logger.info("No stored snapshot; building one now")
        return await self.refresh()

    async def refresh(self) -> Snapshot:
        snapshot = await self.engine.build()
        await asyncio.to_thread(self.store.put, snapshot)
        return snapshot

    async def scheduled_refresh(self) -> None:
        # Nobody is waiting on a timer tick, so failures end here.
        try:
            await self.refresh()
        except Exception:
            logger.exception("Scheduled refresh failed")

    def authorize(self, token: Optional[str]) -> bool:
        expected = self.config.update_token
        if not expected:
            return True
        if token is None:
            return False
        return hmac.compare_digest(token.encode("utf-8"), expected.encode("utf-8"))
