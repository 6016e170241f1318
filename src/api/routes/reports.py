"""Report API — list and generate watch reports for a project."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Path, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from api.routes.schemas import ReportOut
from core.database import get_db
from core.errors import ProjectNotFound
from core.repository import WatchRepository
from workers.briefing.generator import create_report

router = APIRouter(prefix="/api/projects", tags=["reports"])


class ReportCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    period_start: datetime | None = Field(default=None, alias="periodStart")
    period_end: datetime | None = Field(default=None, alias="periodEnd")
    use_ai: bool = Field(default=True, alias="useAi")


@router.get("/{project_id}/reports", response_model=list[ReportOut])
async def list_reports(
    project_id: int = Path(gt=0),
    session: AsyncSession = Depends(get_db),
):
    repo = WatchRepository(session)
    if await repo.get_project(project_id) is None:
        raise ProjectNotFound(project_id)
    return await repo.list_reports(project_id)


@router.post("/{project_id}/reports", response_model=ReportOut, status_code=status.HTTP_201_CREATED)
async def generate_report(
    req: ReportCreate,
    project_id: int = Path(gt=0),
    session: AsyncSession = Depends(get_db),
):
    """Generate a report; AI fields stay empty when synthesis is unavailable."""
    return await create_report(
        session,
        project_id,
        req.period_start,
        req.period_end,
        use_ai=req.use_ai,
    )
