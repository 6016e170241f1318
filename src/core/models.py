"""
SQLAlchemy 2.0 ORM Models — Competitive Watch
==============================================

  - snake_case names
  - BIGINT PKs (auto-increment)
  - Explicit FKs with ON DELETE CASCADE along the ownership chain
    Project → Competitor → MonitoredPage → Snapshot / Change

Tables are grouped by functional area:
  1. Configuration (projects, competitors, monitored pages)
  2. Raw / Operational (snapshots)
  3. Results / Processed (changes)
  4. Delivery (reports)
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum as PyEnum
from typing import Any

from sqlalchemy import (
    DateTime,
    Enum,
    ForeignKey,
    Index,
    String,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base, BigIntPK


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ══════════════════════════════════════════════════════════════════════
# ENUMS
# ══════════════════════════════════════════════════════════════════════

class Frequency(str, PyEnum):
    MANUAL = "MANUAL"
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"


class CompetitorStatus(str, PyEnum):
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    ARCHIVED = "ARCHIVED"


class PageType(str, PyEnum):
    PRICING = "PRICING"
    LANDING = "LANDING"
    PRODUCT = "PRODUCT"
    BLOG = "BLOG"
    OTHER = "OTHER"


class ChangeType(str, PyEnum):
    TEXT = "TEXT"
    PRICE = "PRICE"
    SECTION_ADDED = "SECTION_ADDED"    # reserved
    SECTION_REMOVED = "SECTION_REMOVED"  # reserved
    OTHER = "OTHER"


class Impact(str, PyEnum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


# ══════════════════════════════════════════════════════════════════════
# 1. CONFIGURATION
# ══════════════════════════════════════════════════════════════════════

class Project(Base):
    """
    A watch project: a set of competitors tracked together and
    reported on together.
    """
    __tablename__ = "project"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    frequency: Mapped[Frequency] = mapped_column(
        Enum(Frequency), default=Frequency.MANUAL, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow
    )

    # Relationships
    competitors: Mapped[list["Competitor"]] = relationship(
        "Competitor", back_populates="project", cascade="all, delete-orphan", passive_deletes=True
    )
    reports: Mapped[list["Report"]] = relationship(
        "Report", back_populates="project", cascade="all, delete-orphan", passive_deletes=True
    )


class Competitor(Base):
    """A company tracked inside one project."""
    __tablename__ = "competitor"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(
        ForeignKey("project.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    website_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    tags: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[CompetitorStatus] = mapped_column(
        Enum(CompetitorStatus), default=CompetitorStatus.ACTIVE
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow
    )

    # Relationships
    project: Mapped["Project"] = relationship("Project", back_populates="competitors")
    monitored_pages: Mapped[list["MonitoredPage"]] = relationship(
        "MonitoredPage", back_populates="competitor", cascade="all, delete-orphan", passive_deletes=True
    )


class MonitoredPage(Base):
    """
    A specific URL to be captured for a competitor.
    Only ``note`` and ``page_type`` are editable after creation.
    """
    __tablename__ = "monitored_page"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    competitor_id: Mapped[int] = mapped_column(
        ForeignKey("competitor.id", ondelete="CASCADE"), nullable=False, index=True
    )
    url: Mapped[str] = mapped_column(String(2048), nullable=False)
    page_type: Mapped[PageType] = mapped_column(Enum(PageType), default=PageType.OTHER, index=True)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )

    # Relationships
    competitor: Mapped["Competitor"] = relationship("Competitor", back_populates="monitored_pages")
    snapshots: Mapped[list["Snapshot"]] = relationship(
        "Snapshot", back_populates="page", cascade="all, delete-orphan", passive_deletes=True
    )
    changes: Mapped[list["Change"]] = relationship(
        "Change", back_populates="page", cascade="all, delete-orphan", passive_deletes=True
    )


# ══════════════════════════════════════════════════════════════════════
# 2. RAW / OPERATIONAL
# ══════════════════════════════════════════════════════════════════════

class Snapshot(Base):
    """
    One point-in-time capture of a monitored page.
    Written once by a capture run, never updated.
    ``extracted_pricing`` is NULL when no priced item was found.
    """
    __tablename__ = "snapshot"
    __table_args__ = (
        Index("idx_snapshot_page_captured", "monitored_page_id", "captured_at"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    monitored_page_id: Mapped[int] = mapped_column(
        ForeignKey("monitored_page.id", ondelete="CASCADE"), nullable=False
    )
    captured_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    raw_html: Mapped[str | None] = mapped_column(Text, nullable=True)
    extracted_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    extracted_pricing: Mapped[list[dict[str, Any]] | None] = mapped_column(JSONB, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )

    # Relationships
    page: Mapped["MonitoredPage"] = relationship("MonitoredPage", back_populates="snapshots")


# ══════════════════════════════════════════════════════════════════════
# 3. RESULTS / PROCESSED
# ══════════════════════════════════════════════════════════════════════

class Change(Base):
    """
    A classified delta between two successive snapshots of the same page.
    old_value / new_value are bounded to 2000 characters.
    """
    __tablename__ = "change"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    monitored_page_id: Mapped[int] = mapped_column(
        ForeignKey("monitored_page.id", ondelete="CASCADE"), nullable=False, index=True
    )
    old_snapshot_id: Mapped[int | None] = mapped_column(
        ForeignKey("snapshot.id", ondelete="SET NULL"), nullable=True
    )
    new_snapshot_id: Mapped[int | None] = mapped_column(
        ForeignKey("snapshot.id", ondelete="SET NULL"), nullable=True
    )
    change_type: Mapped[ChangeType] = mapped_column(Enum(ChangeType), nullable=False, index=True)
    field: Mapped[str | None] = mapped_column(String(100), nullable=True)  # content, pricing
    old_value: Mapped[str | None] = mapped_column(Text, nullable=True)
    new_value: Mapped[str | None] = mapped_column(Text, nullable=True)
    change_summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), index=True
    )

    # Relationships
    page: Mapped["MonitoredPage"] = relationship("MonitoredPage", back_populates="changes")
    old_snapshot: Mapped["Snapshot | None"] = relationship("Snapshot", foreign_keys=[old_snapshot_id])
    new_snapshot: Mapped["Snapshot | None"] = relationship("Snapshot", foreign_keys=[new_snapshot_id])


# ══════════════════════════════════════════════════════════════════════
# 4. DELIVERY
# ══════════════════════════════════════════════════════════════════════

class Report(Base):
    """
    AI-assisted synthesis over a project's changes in [period_start, period_end].
    ai_summary is NULL when synthesis was skipped or failed.
    """
    __tablename__ = "report"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(
        ForeignKey("project.id", ondelete="CASCADE"), nullable=False, index=True
    )
    period_start: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    period_end: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    generated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), index=True
    )
    ai_summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    highlights: Mapped[list[dict[str, Any]] | None] = mapped_column(JSONB, nullable=True)
    pdf_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)  # reserved

    # Relationships
    project: Mapped["Project"] = relationship("Project", back_populates="reports")
