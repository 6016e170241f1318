"""Response schemas shared by the API routes."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

from core.models import ChangeType, CompetitorStatus, Frequency, PageType


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class ProjectOut(ORMModel):
    id: int
    name: str
    description: str | None
    frequency: Frequency
    created_at: datetime


class CompetitorOut(ORMModel):
    id: int
    project_id: int
    name: str
    website_url: str | None
    description: str | None
    tags: str | None
    status: CompetitorStatus


class MonitoredPageOut(ORMModel):
    id: int
    competitor_id: int
    url: str
    page_type: PageType
    note: str | None
    created_at: datetime


class SnapshotOut(ORMModel):
    id: int
    monitored_page_id: int
    captured_at: datetime
    extracted_text: str | None
    extracted_pricing: list[dict[str, Any]] | None


class ChangeOut(ORMModel):
    id: int
    monitored_page_id: int
    old_snapshot_id: int | None
    new_snapshot_id: int | None
    change_type: ChangeType
    field: str | None
    old_value: str | None
    new_value: str | None
    change_summary: str | None
    created_at: datetime


class ReportOut(ORMModel):
    id: int
    project_id: int
    period_start: datetime | None
    period_end: datetime | None
    generated_at: datetime
    ai_summary: str | None
    highlights: list[dict[str, Any]] | None
    pdf_url: str | None
