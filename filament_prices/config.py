from __future__ import annotations

from dataclasses import dataclass, field, asdict, fields
from typing import Optional, Dict, Any
import os
import json

from dotenv import load_dotenv

from .version import CONFIG_SCHEMA_VERSION

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; P1SPriceTracker/1.0; +https://example.invalid)"
SNAPSHOT_TTL_SECONDS = 60 * 60 * 24 * 7  # 7 days
STORE_BACKENDS = ("memory", "sqlite")


@dataclass
class TrackerConfig:
    """
    Canonical configuration object passed throughout the system.
    Keep it dataclass-only (no heavy deps) to stay upgrade-friendly.
    """
    schema_version: int = CONFIG_SCHEMA_VERSION
    user_agent: str = DEFAULT_USER_AGENT
    # None leaves the HTTP client's own default in place.
    request_timeout: Optional[float] = None
    # Shared secret for /api/run; unset or empty leaves the endpoint open.
    update_token: Optional[str] = None
    store_backend: str = "memory"
    store_path: str = "data/prices.sqlite3"
    snapshot_ttl_seconds: int = SNAPSHOT_TTL_SECONDS
    # 0 disables the in-process timer.
    refresh_interval_minutes: int = 0
    catalog_path: Optional[str] = None
    # Dotted paths so engine/extractor/exporter can be swapped without code changes.
    engine: str = "filament_prices.engines.simple_engine:SimpleSnapshotEngine"
    extractor: str = "filament_prices.extractors.regex:RegexPriceExtractor"
    exporter: str = "filament_prices.export.json_exporter:JSONExporter"
    output_path: str = "output/prices.json"
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    # ---------- Loaders ----------

    @classmethod
    def from_env(cls) -> "TrackerConfig":
        """
        Build config from environment variables (all optional). A local .env is honoured.
        """
        load_dotenv()

        def _get(name: str, default: str) -> str:
            return os.getenv(name, default)

        timeout = _get("TRACKER_REQUEST_TIMEOUT", "")
        return cls(
            user_agent=_get("TRACKER_USER_AGENT", DEFAULT_USER_AGENT),
            request_timeout=float(timeout) if timeout else None,
            update_token=os.getenv("UPDATE_TOKEN") or None,
            store_backend=_get("TRACKER_STORE", "memory").lower(),
            store_path=_get("TRACKER_STORE_PATH", "data/prices.sqlite3"),
            snapshot_ttl_seconds=int(_get("TRACKER_SNAPSHOT_TTL", str(SNAPSHOT_TTL_SECONDS))),
            refresh_interval_minutes=int(_get("TRACKER_REFRESH_MINUTES", "0")),
            catalog_path=os.getenv("TRACKER_CATALOG_PATH") or None,
            engine=_get("TRACKER_ENGINE", "filament_prices.engines.simple_engine:SimpleSnapshotEngine"),
            extractor=_get("TRACKER_EXTRACTOR", "filament_prices.extractors.regex:RegexPriceExtractor"),
            exporter=_get("TRACKER_EXPORTER", "filament_prices.export.json_exporter:JSONExporter"),
            output_path=_get("TRACKER_OUTPUT_PATH", "output/prices.json"),
        )

    @classmethod
    def from_file(cls, path: str | os.PathLike[str]) -> "TrackerConfig":
        """
        Load configuration from a JSON file. Unknown keys are kept under ``extra``.
        """
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        data = migrate_config(data)
        known = {f.name for f in fields(cls)}
        extra = {k: v for k, v in data.items() if k not in known}
        cfg = cls(**{k: v for k, v in data.items() if k in known})
        cfg.extra.update(extra)
        return cfg

    # ---------- Validation ----------

    def validate(self) -> None:
        if self.store_backend not in STORE_BACKENDS:
            raise ValueError(f"store_backend must be one of {STORE_BACKENDS}, got {self.store_backend!r}")
        if self.snapshot_ttl_seconds <= 0:
            raise ValueError("snapshot_ttl_seconds must be > 0")
        if self.refresh_interval_minutes < 0:
            raise ValueError("refresh_interval_minutes must be >= 0")
        if self.request_timeout is not None and self.request_timeout <= 0:
            raise ValueError("request_timeout must be > 0 when set")
        if not self.user_agent:
            raise ValueError("user_agent cannot be empty")


def migrate_config(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Migrate config dict to the latest schema version.
    Keep this pure and additive. Add migrations here as you bump schema.
    """
    raw = dict(raw)
    raw.setdefault("schema_version", CONFIG_SCHEMA_VERSION)
    return raw
