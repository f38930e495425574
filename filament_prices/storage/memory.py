from __future__ import annotations

import logging
import time
from typing import Dict, Optional, Tuple

logger = logging.getLogger(__name__)


class MemoryKeyValueStore:
    """Process-local store. Lost on restart; fine for a single worker."""

    def __init__(self) -> None:
        self._items: Dict[str, Tuple[str, float]] = {}

    def get(self, key: str) -> Optional[str]:
        item = self._items.get(key)
        if item is None:
            return None
        value, expires_at = item
        if time.time() >= expires_at:
            del self._items[key]
            logger.debug("Key %r expired", key)
            return None
        return value

    def put(self, key: str, value: str, ttl_seconds: float) -> None:
        self._items[key] = (value, time.time() + ttl_seconds)
