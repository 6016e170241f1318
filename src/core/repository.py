"""
Storage operations used by the capture pipeline and the report synthesizer.

Every method works on the session it was given and only flushes; the
caller owns the transaction boundary (commit / rollback).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from core.models import (
    Change,
    ChangeType,
    Competitor,
    MonitoredPage,
    Project,
    Report,
    Snapshot,
    utcnow,
)


class WatchRepository:
    """Thin query layer over an ``AsyncSession``."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    # ── Lookups ────────────────────────────────────────────────────────

    async def get_project(self, project_id: int) -> Project | None:
        return await self.session.get(Project, project_id)

    async def get_competitor(self, competitor_id: int) -> Competitor | None:
        return await self.session.get(Competitor, competitor_id)

    async def get_page(self, page_id: int) -> MonitoredPage | None:
        return await self.session.get(MonitoredPage, page_id)

    async def list_projects(self) -> list[Project]:
        result = await self.session.execute(select(Project).order_by(desc(Project.created_at)))
        return list(result.scalars().all())

    # ── Snapshots ──────────────────────────────────────────────────────

    async def find_latest_snapshot(self, page_id: int) -> Snapshot | None:
        """Most recent capture of a page, or None if it was never captured."""
        result = await self.session.execute(
            select(Snapshot)
            .where(Snapshot.monitored_page_id == page_id)
            .order_by(desc(Snapshot.captured_at), desc(Snapshot.id))
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def create_snapshot(
        self,
        page_id: int,
        *,
        raw_html: str | None,
        extracted_text: str | None,
        extracted_pricing: list[dict[str, Any]] | None,
        captured_at: datetime | None = None,
    ) -> Snapshot:
        snapshot = Snapshot(
            monitored_page_id=page_id,
            captured_at=captured_at or utcnow(),
            raw_html=raw_html,
            extracted_text=extracted_text,
            extracted_pricing=extracted_pricing,
        )
        self.session.add(snapshot)
        await self.session.flush()  # get snapshot.id
        return snapshot

    # ── Changes ────────────────────────────────────────────────────────

    async def create_change(
        self,
        page_id: int,
        *,
        old_snapshot_id: int | None,
        new_snapshot_id: int,
        change_type: ChangeType,
        field: str | None,
        old_value: str | None,
        new_value: str | None,
        summary: str | None,
    ) -> Change:
        change = Change(
            monitored_page_id=page_id,
            old_snapshot_id=old_snapshot_id,
            new_snapshot_id=new_snapshot_id,
            change_type=change_type,
            field=field,
            old_value=old_value,
            new_value=new_value,
            change_summary=summary,
        )
        self.session.add(change)
        await self.session.flush()
        return change

    async def list_page_changes(self, page_id: int, limit: int = 20) -> list[Change]:
        result = await self.session.execute(
            select(Change)
            .where(Change.monitored_page_id == page_id)
            .order_by(desc(Change.created_at), desc(Change.id))
            .limit(limit)
        )
        return list(result.scalars().all())

    async def list_changes_in_window(
        self,
        project_id: int,
        start: datetime,
        end: datetime,
    ) -> list[Change]:
        """
        Changes of every page of the project detected in [start, end],
        oldest first, with page and competitor loaded for prompt rendering.
        """
        result = await self.session.execute(
            select(Change)
            .join(Change.page)
            .join(MonitoredPage.competitor)
            .where(
                Competitor.project_id == project_id,
                Change.created_at >= start,
                Change.created_at <= end,
            )
            .options(selectinload(Change.page).selectinload(MonitoredPage.competitor))
            .order_by(Change.created_at, Change.id)
        )
        return list(result.scalars().all())

    # ── Reports ────────────────────────────────────────────────────────

    async def create_report(
        self,
        project_id: int,
        *,
        period_start: datetime,
        period_end: datetime,
        generated_at: datetime | None = None,
        ai_summary: str | None = None,
        highlights: list[dict[str, Any]] | None = None,
    ) -> Report:
        report = Report(
            project_id=project_id,
            period_start=period_start,
            period_end=period_end,
            generated_at=generated_at or utcnow(),
            ai_summary=ai_summary,
            highlights=highlights if highlights is not None else [],
        )
        self.session.add(report)
        await self.session.flush()
        return report

    async def list_reports(self, project_id: int) -> list[Report]:
        result = await self.session.execute(
            select(Report)
            .where(Report.project_id == project_id)
            .order_by(desc(Report.generated_at), desc(Report.id))
        )
        return list(result.scalars().all())
