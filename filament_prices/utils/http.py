from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

import aiohttp
from aiohttp import ClientSession, ClientTimeout

from ..catalog import CatalogEntry
from ..extractors.base import PriceExtractor
from ..models import EMPTY_OBSERVATION, PriceObservation, Row
from .timeutil import Clock, utc_now

logger = logging.getLogger(__name__)


class FetchStatus(enum.Enum):
    PRICED = "priced"
    NO_PRICE = "no_price"
    FAILED = "failed"


@dataclass(frozen=True)
class FetchOutcome:
    """
    Result of fetching and extracting one catalog entry.
    FAILED and NO_PRICE are kept apart here for logging, and collapse to the
    same price-less Row once converted.
    """

    entry: CatalogEntry
    status: FetchStatus
    observation: PriceObservation
    scraped_at: datetime
    error: Optional[str] = None

    def to_row(self) -> Row:
        return Row.from_observation(self.entry, self.observation, self.scraped_at)


def create_session() -> ClientSession:
    """
    Create a shared aiohttp ClientSession.
    """
    # Note: caller is responsible for closing the session (await session.close()).
    connector = aiohttp.TCPConnector(limit=0)  # catalog is small; every entry goes out at once
    return aiohttp.ClientSession(connector=connector)


async def fetch_one(
    session: ClientSession,
    entry: CatalogEntry,
    extractor: PriceExtractor,
    *,
    user_agent: str,
    timeout: Optional[float] = None,
    clock: Clock = utc_now,
) -> FetchOutcome:
    """
    GET one product page and run the extractor over it. Never raises: any
    failure becomes a FAILED outcome. Non-2xx pages are still extracted.
    """
    kwargs: Dict[str, Any] = {}
    if timeout is not None:
        kwargs["timeout"] = ClientTimeout(total=timeout)
    try:
        async with session.get(entry.url, headers={"User-Agent": user_agent}, **kwargs) as resp:
            if resp.status >= 400:
                logger.debug("HTTP %s for %s", resp.status, entry.url)
            html = await resp.text()
    except Exception as exc:  # broad catch: one bad page must not sink the snapshot
        logger.debug("fetch failed for %s: %r", entry.url, exc)
        return FetchOutcome(entry, FetchStatus.FAILED, EMPTY_OBSERVATION, clock(), error=repr(exc))

    try:
        observation = extractor.extract(html)
    except Exception as exc:  # a misbehaving extractor costs one row, not the build
        logger.warning("extractor %s failed on %s: %r", getattr(extractor, "name", extractor), entry.url, exc)
        return FetchOutcome(entry, FetchStatus.FAILED, EMPTY_OBSERVATION, clock(), error=repr(exc))
    status = FetchStatus.PRICED if observation.price is not None else FetchStatus.NO_PRICE
    return FetchOutcome(entry, status, observation, clock())
