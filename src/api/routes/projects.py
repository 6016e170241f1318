"""Project API — minimal setup of projects, competitors and monitored pages."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Path, status
from pydantic import BaseModel, Field, HttpUrl
from sqlalchemy.ext.asyncio import AsyncSession

from api.routes.schemas import CompetitorOut, MonitoredPageOut, ProjectOut
from core.database import get_db
from core.errors import CompetitorNotFound, ProjectNotFound
from core.models import Competitor, CompetitorStatus, Frequency, MonitoredPage, PageType, Project
from core.repository import WatchRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["projects"])


# ── Request Schemas ───────────────────────────────────────────────────

class ProjectCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    frequency: Frequency = Frequency.MANUAL


class CompetitorCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    website_url: HttpUrl | None = None
    description: str | None = None
    tags: str | None = None
    status: CompetitorStatus = CompetitorStatus.ACTIVE


class MonitoredPageCreate(BaseModel):
    url: HttpUrl
    page_type: PageType = PageType.OTHER
    note: str | None = None


# ── Endpoints ─────────────────────────────────────────────────────────

@router.get("/projects", response_model=list[ProjectOut])
async def list_projects(session: AsyncSession = Depends(get_db)):
    return await WatchRepository(session).list_projects()


@router.post("/projects", response_model=ProjectOut, status_code=status.HTTP_201_CREATED)
async def create_project(req: ProjectCreate, session: AsyncSession = Depends(get_db)):
    project = Project(name=req.name.strip(), description=req.description, frequency=req.frequency)
    session.add(project)
    await session.flush()
    logger.info("Created project #%d %r", project.id, project.name)
    return project


@router.get("/projects/{project_id}", response_model=ProjectOut)
async def get_project(
    project_id: int = Path(gt=0),
    session: AsyncSession = Depends(get_db),
):
    project = await WatchRepository(session).get_project(project_id)
    if project is None:
        raise ProjectNotFound(project_id)
    return project


@router.post(
    "/projects/{project_id}/competitors",
    response_model=CompetitorOut,
    status_code=status.HTTP_201_CREATED,
)
async def create_competitor(
    req: CompetitorCreate,
    project_id: int = Path(gt=0),
    session: AsyncSession = Depends(get_db),
):
    if await WatchRepository(session).get_project(project_id) is None:
        raise ProjectNotFound(project_id)

    competitor = Competitor(
        project_id=project_id,
        name=req.name.strip(),
        website_url=str(req.website_url) if req.website_url else None,
        description=req.description,
        tags=req.tags,
        status=req.status,
    )
    session.add(competitor)
    await session.flush()
    return competitor


@router.post(
    "/competitors/{competitor_id}/pages",
    response_model=MonitoredPageOut,
    status_code=status.HTTP_201_CREATED,
)
async def create_monitored_page(
    req: MonitoredPageCreate,
    competitor_id: int = Path(gt=0),
    session: AsyncSession = Depends(get_db),
):
    if await WatchRepository(session).get_competitor(competitor_id) is None:
        raise CompetitorNotFound(competitor_id)

    page = MonitoredPage(
        competitor_id=competitor_id,
        url=str(req.url),
        page_type=req.page_type,
        note=req.note,
    )
    session.add(page)
    await session.flush()
    return page
