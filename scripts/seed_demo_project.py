"""
Seed script — Creates a demo watch project.
Inserts: one project, two competitors, their pricing/landing pages.
Idempotent: an existing project with the same name is left untouched.

Run:  PYTHONPATH=src python scripts/seed_demo_project.py
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sqlalchemy import select  # noqa: E402

from core.config import settings  # noqa: E402
from core.database import Database  # noqa: E402
from core.models import (  # noqa: E402
    Competitor, CompetitorStatus,
    Frequency,
    MonitoredPage, PageType,
    Project,
)

PROJECT_NAME = "Demo SaaS watch"

COMPETITORS = [
    {
        "name": "Acme Analytics",
        "website_url": "https://www.acme-analytics.example",
        "pages": [
            {"url": "https://www.acme-analytics.example/pricing", "page_type": PageType.PRICING},
            {"url": "https://www.acme-analytics.example/", "page_type": PageType.LANDING},
        ],
    },
    {
        "name": "Globex Metrics",
        "website_url": "https://globex-metrics.example",
        "pages": [
            {"url": "https://globex-metrics.example/plans", "page_type": PageType.PRICING, "note": "Plans table"},
        ],
    },
]


async def seed() -> None:
    database = Database.from_settings(settings)
    await database.create_all()

    async with database.session() as session:
        existing = await session.execute(select(Project).where(Project.name == PROJECT_NAME))
        project = existing.scalar_one_or_none()
        if project:
            print(f"  ⏭️  Project '{PROJECT_NAME}' already exists (ID: {project.id})")
            await database.dispose()
            return

        project = Project(
            name=PROJECT_NAME,
            description="Pricing and messaging of the main analytics SaaS competitors.",
            frequency=Frequency.WEEKLY,
        )
        session.add(project)
        await session.flush()

        for entry in COMPETITORS:
            competitor = Competitor(
                project_id=project.id,
                name=entry["name"],
                website_url=entry["website_url"],
                status=CompetitorStatus.ACTIVE,
            )
            session.add(competitor)
            await session.flush()
            for page in entry["pages"]:
                session.add(MonitoredPage(competitor_id=competitor.id, **page))
            print(f"  ➕ {competitor.name}: {len(entry['pages'])} pages")

        await session.commit()
        print(f"  ✅ Project '{project.name}' seeded (ID: {project.id})")

    await database.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
