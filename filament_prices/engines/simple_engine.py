from __future__ import annotations

import asyncio
import logging
from collections import Counter
from typing import List, Optional, Sequence

from aiohttp import ClientSession

from .base import SnapshotEngine
from ..catalog import CatalogEntry, load_catalog
from ..config import TrackerConfig
from ..extractors.base import PriceExtractor
from ..extractors.regex import RegexPriceExtractor
from ..models import Snapshot
from ..utils.http import FetchOutcome, FetchStatus, create_session, fetch_one
from ..utils.loader import load_symbol
from ..utils.timeutil import Clock, utc_now

logger = logging.getLogger(__name__)


async def scrape_all(
    catalog: Sequence[CatalogEntry],
    extractor: PriceExtractor,
    *,
    user_agent: str,
    timeout: Optional[float] = None,
    session: Optional[ClientSession] = None,
    clock: Clock = utc_now,
) -> Snapshot:
    """
    Fetch every catalog entry at once and wait for all of them.
    Rows come back in catalog order whatever order the responses arrive in.
    """
    own_session = session is None
    if session is None:
        session = create_session()
    try:
        outcomes: List[FetchOutcome] = await asyncio.gather(
            *(
                fetch_one(session, entry, extractor, user_agent=user_agent, timeout=timeout, clock=clock)
                for entry in catalog
            )
        )
    finally:
        if own_session:
            await session.close()

    _log_summary(outcomes)
    return Snapshot(updated_at=clock(), rows=[o.to_row() for o in outcomes])


def _log_summary(outcomes: Sequence[FetchOutcome]) -> None:
    counts = Counter(o.status for o in outcomes)
    logger.info(
        "Snapshot built: %s rows | priced: %s | no price: %s | fetch failed: %s",
        len(outcomes),
        counts[FetchStatus.PRICED],
        counts[FetchStatus.NO_PRICE],
        counts[FetchStatus.FAILED],
    )
    for o in outcomes:
        if o.status is FetchStatus.FAILED:
            logger.debug("No page for %s %s (%s): %s", o.entry.brand, o.entry.product, o.entry.url, o.error)


class SimpleSnapshotEngine(SnapshotEngine):
    """
    Single-pass engine: one session, one request per catalog entry, all in flight together.
    No retries, no per-entry timeout beyond the configured client timeout.
    """
    def __init__(
        self,
        config: TrackerConfig,
        catalog: Sequence[CatalogEntry] | None = None,
        extractor: PriceExtractor | None = None,
        session_factory=create_session,
        clock: Clock = utc_now,
    ) -> None:
        self.config = config
        self.catalog = tuple(catalog) if catalog is not None else load_catalog(config.catalog_path)
        if not self.catalog:
            raise ValueError("catalog cannot be empty")
        self.extractor = extractor or self._load_extractor(config.extractor)
        self.session_factory = session_factory
        self.clock = clock

    @staticmethod
    def _load_extractor(dotted: str) -> PriceExtractor:
        try:
            return load_symbol(dotted)()
        except Exception as exc:
            logger.warning("Failed to load extractor %s: %r; using regex extractor", dotted, exc)
            return RegexPriceExtractor()

    async def build(self) -> Snapshot:
        session = self.session_factory()
        try:
            return await scrape_all(
                self.catalog,
                self.extractor,
                user_agent=self.config.user_agent,
                timeout=self.config.request_timeout,
                session=session,
                clock=self.clock,
            )
        finally:
            await session.close()
