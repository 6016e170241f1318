"""
FastAPI application entry point.

Exposes the on-demand capture run, change history and report
endpoints, plus the minimal project / competitor / page setup.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from api.routes.monitored_pages import router as monitored_pages_router
from api.routes.projects import router as projects_router
from api.routes.reports import router as reports_router
from core.config import settings
from core.database import Database
from core.errors import FetchFailure, NotFound, PersistenceFailure

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: one Database handle per process."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # Tests inject their own handle before startup
    owns_database = getattr(app.state, "database", None) is None
    if owns_database:
        app.state.database = Database.from_settings(settings)
    logger.info("Competitive Watch API started")
    yield
    if owns_database:
        await app.state.database.dispose()


app = FastAPI(
    title="Competitive Watch",
    description="Competitor page capture, change detection and AI reports",
    version="0.1.0",
    lifespan=lifespan,
)

# ── Routes ────────────────────────────────────────────────────────────
app.include_router(projects_router)
app.include_router(monitored_pages_router)
app.include_router(reports_router)


# ── Error mapping ─────────────────────────────────────────────────────

@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound) -> JSONResponse:
    return JSONResponse(status_code=404, content={"message": str(exc)})


@app.exception_handler(FetchFailure)
async def fetch_failure_handler(request: Request, exc: FetchFailure) -> JSONResponse:
    return JSONResponse(
        status_code=502,
        content={"message": str(exc), "status_code": exc.status_code},
    )


@app.exception_handler(PersistenceFailure)
async def persistence_failure_handler(request: Request, exc: PersistenceFailure) -> JSONResponse:
    return JSONResponse(status_code=500, content={"message": str(exc)})


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok", "service": "competitive-watch"}
