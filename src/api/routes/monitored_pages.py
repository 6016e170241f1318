"""Monitored page API — on-demand capture run and change history."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from api.routes.schemas import ChangeOut, MonitoredPageOut, SnapshotOut
from core.database import get_db
from core.errors import PageNotFound
from core.repository import WatchRepository
from workers.web_monitor.orchestrator import capture_page

router = APIRouter(prefix="/api/monitored-pages", tags=["monitored-pages"])

CHANGE_HISTORY_LIMIT = 20


class ScrapeResponse(BaseModel):
    snapshot: SnapshotOut
    change: ChangeOut | None
    has_change: bool
    message: str


@router.get("/{page_id}", response_model=MonitoredPageOut)
async def get_monitored_page(
    page_id: int = Path(gt=0),
    session: AsyncSession = Depends(get_db),
):
    page = await WatchRepository(session).get_page(page_id)
    if page is None:
        raise PageNotFound(page_id)
    return page


@router.post("/{page_id}/scrape", response_model=ScrapeResponse, status_code=status.HTTP_201_CREATED)
async def run_scrape(
    page_id: int = Path(gt=0),
    session: AsyncSession = Depends(get_db),
):
    """
    Capture the page now and compare it with its previous snapshot.

    FetchFailure → 502, nothing persisted.
    """
    outcome = await capture_page(session, page_id)
    return ScrapeResponse(
        snapshot=SnapshotOut.model_validate(outcome.snapshot),
        change=ChangeOut.model_validate(outcome.change) if outcome.change else None,
        has_change=outcome.has_change,
        message=outcome.message,
    )


@router.get("/{page_id}/changes", response_model=list[ChangeOut])
async def list_changes(
    page_id: int = Path(gt=0),
    session: AsyncSession = Depends(get_db),
):
    """Latest changes of a page, newest first."""
    repo = WatchRepository(session)
    if await repo.get_page(page_id) is None:
        raise PageNotFound(page_id)
    return await repo.list_page_changes(page_id, limit=CHANGE_HISTORY_LIMIT)
