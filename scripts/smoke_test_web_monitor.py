"""Smoke test: capture one monitored page twice and print what changed."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from core.config import settings  # noqa: E402
from core.database import Database  # noqa: E402
from core.errors import FetchFailure, PageNotFound  # noqa: E402
from core.repository import WatchRepository  # noqa: E402
from workers.web_monitor.orchestrator import capture_page  # noqa: E402


async def main(page_id: int, runs: int) -> None:
    print(f"🚀 Starting Smoke Test: capture pipeline on page #{page_id}")
    database = Database.from_settings(settings)

    try:
        async with database.session() as session:
            for run in range(1, runs + 1):
                print(f"\n🔍 Run {run}/{runs}...")
                try:
                    outcome = await capture_page(session, page_id)
                except PageNotFound:
                    print(f"  ❌ Page #{page_id} does not exist. Run scripts/seed_demo_project.py first.")
                    return
                except FetchFailure as exc:
                    print(f"  ❌ Fetch failed: {exc}")
                    return

                pricing = outcome.snapshot.extracted_pricing or []
                print(f"  ✅ Snapshot #{outcome.snapshot.id}: {len(outcome.snapshot.extracted_text or '')} chars, "
                      f"{len(pricing)} priced items")
                print(f"  {outcome.message}")
                for change in outcome.changes:
                    print(f"    • {change.change_type.value}: {change.change_summary}")

            recent = await WatchRepository(session).list_page_changes(page_id)
            print(f"\n🏁 Finished: {len(recent)} changes recorded for this page so far.")
    finally:
        await database.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("page_id", type=int)
    parser.add_argument("--runs", type=int, default=2)
    args = parser.parse_args()
    asyncio.run(main(args.page_id, args.runs))
