from __future__ import annotations

from contextlib import asynccontextmanager
from importlib import resources
from typing import AsyncIterator, Dict, Optional
import logging

from fastapi import FastAPI, Query
from fastapi.responses import HTMLResponse, JSONResponse, Response

from ..config import TrackerConfig
from ..models import Snapshot
from ..scheduler import start_scheduler, stop_scheduler
from ..tracker import PriceTracker
from ..version import __version__

logger = logging.getLogger(__name__)


def _snapshot_response(snapshot: Snapshot, headers: Optional[Dict[str, str]] = None) -> Response:
    return Response(
        content=snapshot.to_json(indent=2),
        media_type="application/json",
        headers=headers,
    )


def _index_html() -> str:
    return resources.files("filament_prices.ui").joinpath("static/index.html").read_text(encoding="utf-8")


def create_app(tracker: PriceTracker | None = None) -> FastAPI:
    """
    Build the API around a tracker. With no tracker, one is built from the environment.
    Run with ``uvicorn --factory filament_prices.apis.app:create_app``.
    """
    if tracker is None:
        tracker = PriceTracker.from_config(TrackerConfig.from_env())

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        scheduler = start_scheduler(tracker, tracker.config.refresh_interval_minutes)
        try:
            yield
        finally:
            stop_scheduler(scheduler)

    app = FastAPI(title="Filament Price Tracker", version=__version__, lifespan=lifespan)
    app.state.tracker = tracker

    @app.get("/health")
    async def health() -> Dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/prices")
    async def prices() -> Response:
        snapshot = await tracker.latest_or_build()
        return _snapshot_response(snapshot, headers={"Access-Control-Allow-Origin": "*"})

    @app.get("/api/run")
    async def run(token: Optional[str] = Query(default=None)) -> Response:
        if not tracker.authorize(token):
            logger.warning("Rejected manual refresh with a missing or wrong token")
            return JSONResponse({"error": "forbidden"}, status_code=403)
        snapshot = await tracker.refresh()
        return _snapshot_response(snapshot)

    @app.get("/", response_class=HTMLResponse)
    async def index() -> HTMLResponse:
        return HTMLResponse(_index_html())

    return app
