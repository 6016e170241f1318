"""
Test configuration and fixtures.
Uses SQLite in-memory for fast tests. Mocks the fetcher and AI providers.
"""
from datetime import datetime, timezone

import pytest
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.compiler import compiles

from core.database import Database
from core.models import Competitor, MonitoredPage, PageType, Project


# Register JSONB as JSON for SQLite compatibility in tests
@compiles(JSONB, "sqlite")
def _compile_jsonb_sqlite(type_, compiler, **kw):
    return "JSON"


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def database():
    """In-memory SQLite Database handle with every table created."""
    database = Database(TEST_DATABASE_URL)
    await database.create_all()
    yield database
    await database.dispose()


@pytest.fixture
async def db(database):
    """A session on the in-memory database."""
    async with database.session() as session:
        yield session


@pytest.fixture
async def project(db):
    project = Project(name="Acme watch", description="Analytics SaaS competitors")
    db.add(project)
    await db.commit()
    return project


@pytest.fixture
async def competitor(db, project):
    competitor = Competitor(project_id=project.id, name="Acme Analytics", website_url="https://acme.example")
    db.add(competitor)
    await db.commit()
    return competitor


@pytest.fixture
async def page(db, competitor):
    page = MonitoredPage(
        competitor_id=competitor.id,
        url="https://acme.example/pricing",
        page_type=PageType.PRICING,
    )
    db.add(page)
    await db.commit()
    return page


@pytest.fixture
def fixed_now():
    return datetime(2025, 1, 8, 12, 0, tzinfo=timezone.utc)
