from .base import KeyValueStore
from .memory import MemoryKeyValueStore
from .snapshot_store import LATEST_KEY, SnapshotStore, create_kv_store, create_snapshot_store
from .sqlite import SqliteKeyValueStore

__all__ = [
    "KeyValueStore",
    "LATEST_KEY",
    "MemoryKeyValueStore",
    "SnapshotStore",
    "SqliteKeyValueStore",
    "create_kv_store",
    "create_snapshot_store",
]
