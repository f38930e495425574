from __future__ import annotations

import argparse
import asyncio
import logging
from typing import List

from ..config import TrackerConfig
from ..export.base import Exporter
from ..models import Snapshot
from ..tracker import PriceTracker
from ..utils.logging import setup_logging
from ..utils.loader import load_symbol

logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Filament price tracker")
    p.add_argument("--config", type=str, help="Path to config JSON", default=None)
    p.add_argument("--catalog", type=str, default=None, help="Path to a catalog JSON array (default: built-in)")
    p.add_argument("--extractor", type=str, default=None, help="Extractor dotted path (module:ClassName)")
    p.add_argument("--exporter", type=str, default=None, help="Exporter dotted path (module:ClassName)")
    p.add_argument("--output", type=str, default=None, help="Output file path")
    p.add_argument("--store", choices=["memory", "sqlite"], default=None, help="Snapshot store backend")
    p.add_argument("--store-path", type=str, default=None, help="SQLite file (when --store sqlite)")
    p.add_argument("--log-level", type=str, default=None, help="Log level (DEBUG, INFO, WARNING, ERROR)")
    p.add_argument("--serve", action="store_true", help="Run the HTTP server instead of a one-shot scrape")
    p.add_argument("--host", type=str, default="127.0.0.1", help="API host (when --serve)")
    p.add_argument("--port", type=int, default=8000, help="API port (when --serve)")
    return p


def _load_config(args: argparse.Namespace) -> TrackerConfig:
    if args.config:
        cfg = TrackerConfig.from_file(args.config)
    else:
        cfg = TrackerConfig.from_env()

    if args.catalog:
        cfg.catalog_path = args.catalog
    if args.extractor:
        cfg.extractor = args.extractor
    if args.exporter:
        cfg.exporter = args.exporter
    if args.output:
        cfg.output_path = args.output
    if args.store:
        cfg.store_backend = args.store
    if args.store_path:
        cfg.store_path = args.store_path

    cfg.validate()
    return cfg


def run_server(host: str, port: int) -> None:
    import uvicorn

    uvicorn.run("filament_prices.apis.app:create_app", factory=True, host=host, port=port)


def run_cli(argv: List[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    setup_logging(args.log_level)

    if args.serve:
        run_server(args.host, args.port)
        return 0

    cfg = _load_config(args)
    tracker = PriceTracker.from_config(cfg)
    exporter_cls = load_symbol(cfg.exporter)

    snapshot: Snapshot = asyncio.run(tracker.refresh())

    exporter: Exporter = exporter_cls()
    exporter.export(snapshot, cfg.output_path)

    priced = sum(1 for r in snapshot.rows if r.price is not None)
    logger.info("Rows: %s | Priced: %s | Output: %s", len(snapshot.rows), priced, cfg.output_path)
    return 0
