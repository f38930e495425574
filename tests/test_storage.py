# tests/test_storage.py

"""Tests for the key-value backends and the single-slot snapshot store."""

import tempfile
import time
import unittest
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from unittest.mock import patch

from filament_prices.config import SNAPSHOT_TTL_SECONDS, TrackerConfig
from filament_prices.models import PriceObservation, Row, Snapshot
from filament_prices.storage import (
    LATEST_KEY,
    MemoryKeyValueStore,
    SnapshotStore,
    SqliteKeyValueStore,
    create_kv_store,
)
from tests.fakes import StepClock, entry

WEEK = SNAPSHOT_TTL_SECONDS


def _snapshot(price: float = 19.99) -> Snapshot:
    clock = StepClock()
    rows = [
        Row.from_observation(entry(1), PriceObservation(price, "USD"), clock()),
        Row.from_observation(entry(2, abrasive=True), PriceObservation(), clock()),
    ]
    return Snapshot(updated_at=clock(), rows=rows)


class TestMemoryKeyValueStore(unittest.TestCase):
    """In-process backend."""

    def setUp(self) -> None:
        self.kv = MemoryKeyValueStore()

    def test_missing_key(self) -> None:
        self.assertIsNone(self.kv.get("latest"))

    def test_put_then_get(self) -> None:
        self.kv.put("latest", "value", 60)
        self.assertEqual(self.kv.get("latest"), "value")

    def test_overwrite_replaces_value(self) -> None:
        self.kv.put("latest", "first", 60)
        self.kv.put("latest", "second", 60)
        self.assertEqual(self.kv.get("latest"), "second")

    def test_expired_value_reads_as_absent(self) -> None:
        self.kv.put("latest", "value", 60)
        future = time.time() + 61
        with patch("filament_prices.storage.memory.time.time", return_value=future):
            self.assertIsNone(self.kv.get("latest"))
        self.assertIsNone(self.kv.get("latest"))


class TestSqliteKeyValueStore(unittest.TestCase):
    """File-backed backend."""

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "nested" / "kv.sqlite3"
        self.kv = SqliteKeyValueStore(self.path)

    def tearDown(self) -> None:
        self.kv.close()
        self._tmp.cleanup()

    def test_creates_parent_directory(self) -> None:
        self.assertTrue(self.path.parent.is_dir())

    def test_put_then_get(self) -> None:
        self.kv.put("latest", "value", 60)
        self.assertEqual(self.kv.get("latest"), "value")

    def test_overwrite_replaces_value(self) -> None:
        self.kv.put("latest", "first", 60)
        self.kv.put("latest", "second", 60)
        self.assertEqual(self.kv.get("latest"), "second")

    def test_value_survives_reopen(self) -> None:
        self.kv.put("latest", "persisted", 60)
        self.kv.close()
        self.kv = SqliteKeyValueStore(self.path)
        self.assertEqual(self.kv.get("latest"), "persisted")

    def test_expired_value_reads_as_absent(self) -> None:
        self.kv.put("latest", "value", 60)
        future = time.time() + 61
        with patch("filament_prices.storage.sqlite.time.time", return_value=future):
            self.assertIsNone(self.kv.get("latest"))

    def test_calls_from_worker_threads(self) -> None:
        def write_then_read(n: int) -> str | None:
            self.kv.put(f"key-{n}", f"value-{n}", 60)
            return self.kv.get(f"key-{n}")

        with ThreadPoolExecutor(max_workers=4) as pool:
            results = list(pool.map(write_then_read, range(20)))
        self.assertEqual(results, [f"value-{n}" for n in range(20)])


class TestSnapshotStore(unittest.TestCase):
    """Single-slot snapshot cache with a seven-day window."""

    def setUp(self) -> None:
        self.kv = MemoryKeyValueStore()
        self.store = SnapshotStore(self.kv)

    def test_empty_store(self) -> None:
        self.assertIsNone(self.store.get())

    def test_round_trip_is_deep_equal(self) -> None:
        snap = _snapshot()
        self.store.put(snap)
        restored = self.store.get()
        self.assertEqual(restored, snap)
        assert restored is not None
        self.assertEqual(restored.to_dict(), snap.to_dict())

    def test_written_under_latest_key_as_text(self) -> None:
        self.store.put(_snapshot())
        raw = self.kv.get(LATEST_KEY)
        self.assertIsInstance(raw, str)
        self.assertIn('"updatedAt"', raw or "")

    def test_new_snapshot_replaces_old(self) -> None:
        self.store.put(_snapshot(10.0))
        self.store.put(_snapshot(20.0))
        restored = self.store.get()
        assert restored is not None
        self.assertEqual(restored.rows[0].price, 20.0)

    def test_absent_after_retention_window(self) -> None:
        self.store.put(_snapshot())
        with patch("filament_prices.storage.memory.time.time", return_value=time.time() + WEEK + 1):
            self.assertIsNone(self.store.get())

    def test_present_just_before_window_ends(self) -> None:
        self.store.put(_snapshot())
        with patch("filament_prices.storage.memory.time.time", return_value=time.time() + WEEK - 60):
            self.assertIsNotNone(self.store.get())

    def test_sqlite_backed_round_trip(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            kv = SqliteKeyValueStore(Path(tmp) / "prices.sqlite3")
            try:
                store = SnapshotStore(kv)
                snap = _snapshot()
                store.put(snap)
                self.assertEqual(store.get(), snap)
            finally:
                kv.close()


class TestCreateKvStore(unittest.TestCase):
    """Backend selection from config."""

    def test_memory_backend(self) -> None:
        self.assertIsInstance(create_kv_store(TrackerConfig()), MemoryKeyValueStore)

    def test_sqlite_backend(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            cfg = TrackerConfig(store_backend="sqlite", store_path=str(Path(tmp) / "kv.sqlite3"))
            kv = create_kv_store(cfg)
            try:
                self.assertIsInstance(kv, SqliteKeyValueStore)
            finally:
                kv.close()

    def test_unknown_backend(self) -> None:
        with self.assertRaises(ValueError):
            create_kv_store(TrackerConfig(store_backend="redis"))
