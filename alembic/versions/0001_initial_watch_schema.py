"""initial_watch_schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18 09:00:00.000000

Adds:
- project, competitor, monitored_page (configuration)
- snapshot (captures), change (detected deltas)
- report (AI-assisted synthesis)
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0001_initial"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

frequency = sa.Enum("MANUAL", "DAILY", "WEEKLY", "MONTHLY", name="frequency")
competitor_status = sa.Enum("ACTIVE", "PAUSED", "ARCHIVED", name="competitorstatus")
page_type = sa.Enum("PRICING", "LANDING", "PRODUCT", "BLOG", "OTHER", name="pagetype")
change_type = sa.Enum("TEXT", "PRICE", "SECTION_ADDED", "SECTION_REMOVED", "OTHER", name="changetype")


def _timestamp(name: str, index: bool = False) -> sa.Column:
    return sa.Column(
        name, sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False, index=index
    )


def upgrade() -> None:
    op.create_table(
        "project",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("frequency", frequency, nullable=False, server_default="MANUAL"),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_project_frequency", "project", ["frequency"])

    op.create_table(
        "competitor",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("project_id", sa.BigInteger(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("website_url", sa.String(length=2048), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("tags", sa.Text(), nullable=True),
        sa.Column("status", competitor_status, nullable=False, server_default="ACTIVE"),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.ForeignKeyConstraint(["project_id"], ["project.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_competitor_project_id", "competitor", ["project_id"])

    op.create_table(
        "monitored_page",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("competitor_id", sa.BigInteger(), nullable=False),
        sa.Column("url", sa.String(length=2048), nullable=False),
        sa.Column("page_type", page_type, nullable=False, server_default="OTHER"),
        sa.Column("note", sa.Text(), nullable=True),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["competitor_id"], ["competitor.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_monitored_page_competitor_id", "monitored_page", ["competitor_id"])
    op.create_index("ix_monitored_page_page_type", "monitored_page", ["page_type"])

    op.create_table(
        "snapshot",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("monitored_page_id", sa.BigInteger(), nullable=False),
        _timestamp("captured_at"),
        sa.Column("raw_html", sa.Text(), nullable=True),
        sa.Column("extracted_text", sa.Text(), nullable=True),
        sa.Column("extracted_pricing", postgresql.JSONB(), nullable=True),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["monitored_page_id"], ["monitored_page.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_snapshot_page_captured", "snapshot", ["monitored_page_id", "captured_at"])

    op.create_table(
        "change",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("monitored_page_id", sa.BigInteger(), nullable=False),
        sa.Column("old_snapshot_id", sa.BigInteger(), nullable=True),
        sa.Column("new_snapshot_id", sa.BigInteger(), nullable=True),
        sa.Column("change_type", change_type, nullable=False),
        sa.Column("field", sa.String(length=100), nullable=True),
        sa.Column("old_value", sa.Text(), nullable=True),
        sa.Column("new_value", sa.Text(), nullable=True),
        sa.Column("change_summary", sa.Text(), nullable=True),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["monitored_page_id"], ["monitored_page.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["old_snapshot_id"], ["snapshot.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["new_snapshot_id"], ["snapshot.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_change_monitored_page_id", "change", ["monitored_page_id"])
    op.create_index("ix_change_change_type", "change", ["change_type"])
    op.create_index("ix_change_created_at", "change", ["created_at"])

    op.create_table(
        "report",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("project_id", sa.BigInteger(), nullable=False),
        sa.Column("period_start", sa.DateTime(timezone=True), nullable=True),
        sa.Column("period_end", sa.DateTime(timezone=True), nullable=True),
        _timestamp("generated_at"),
        sa.Column("ai_summary", sa.Text(), nullable=True),
        sa.Column("highlights", postgresql.JSONB(), nullable=True),
        sa.Column("pdf_url", sa.String(length=2048), nullable=True),
        sa.ForeignKeyConstraint(["project_id"], ["project.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_report_project_id", "report", ["project_id"])
    op.create_index("ix_report_generated_at", "report", ["generated_at"])


def downgrade() -> None:
    op.drop_table("report")
    op.drop_table("change")
    op.drop_table("snapshot")
    op.drop_table("monitored_page")
    op.drop_table("competitor")
    op.drop_table("project")
    for enum in (change_type, page_type, competitor_status, frequency):
        enum.drop(op.get_bind(), checkfirst=True)
