from __future__ import annotations

from typing import Optional, Protocol


class KeyValueStore(Protocol):
    """
    Text key-value store with per-key expiry. Expired keys read as absent.
    Each call is assumed atomic; callers do no locking of their own.
    """

    def get(self, key: str) -> Optional[str]:
        ...

    def put(self, key: str, value: str, ttl_seconds: float) -> None:
        ...
