"""
verify_ai_report.py
===================
Verifies the report synthesis against the configured LLM with mock changes.
No database needed: the prompt is built from in-memory change lines.
"""

from __future__ import annotations

import asyncio
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from types import SimpleNamespace

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from core.ai.factory import AIFactory  # noqa: E402
from workers.briefing.generator import ChangeLine, generate_ai_report  # noqa: E402


async def test() -> None:
    print("--- Testing AI Report Generation ---")

    provider = AIFactory.create()
    if provider is None:
        print("❌ Skip: no OPENAI_API_KEY / GEMINI_API_KEY found in env.")
        return

    now = datetime.now(timezone.utc)
    lines = [
        ChangeLine(
            created_at=now - timedelta(days=2),
            competitor_name="Acme Analytics",
            page_type="PRICING",
            url="https://www.acme-analytics.example/pricing",
            change_type="PRICE",
            field="pricing",
            summary="Pricing or plans changed on this page.",
            old_value='[{"amount":29,"currency":"EUR","label":"Starter 29 €"}]',
            new_value='[{"amount":35,"currency":"EUR","label":"Starter 35 €"}]',
        ),
        ChangeLine(
            created_at=now - timedelta(days=1),
            competitor_name="Globex Metrics",
            page_type="LANDING",
            url="https://globex-metrics.example/",
            change_type="TEXT",
            field="content",
            summary="Text content changed (length 1840 → 2310).",
        ),
    ]
    project = SimpleNamespace(id=0, name="Demo SaaS watch", description="Analytics SaaS competitors.")

    print(f"Using Model: {provider.model_name}")
    result = await generate_ai_report(provider, project, now - timedelta(days=7), now, lines)
    if result is None:
        print("❌ Failed: synthesis unavailable (see logs).")
        return

    print("\n--- GENERATED REPORT ---\n")
    print(result.ai_summary)
    for highlight in result.highlights:
        print(f"  [{highlight['impact'] or '?'}] {highlight['title']} ({highlight['competitor']})")
    print("\n------------------------\n")
    print("✅ Success!")


if __name__ == "__main__":
    asyncio.run(test())
