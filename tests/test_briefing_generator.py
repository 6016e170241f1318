"""
Tests for src/workers/briefing/generator.py — window resolution, prompt
rendering, AI output normalization and report persistence.
"""
import asyncio
import json
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from core.config import settings
from core.errors import ProjectNotFound, SynthesisUnavailable
from core.models import Change, ChangeType, Competitor, MonitoredPage, PageType, Project
from workers.briefing.generator import (
    AI_SUMMARY_UNAVAILABLE,
    MAX_PROMPT_CHANGES,
    NO_CHANGES_SUMMARY,
    ChangeLine,
    build_changes_prompt,
    build_user_prompt,
    create_report,
    generate_ai_report,
    parse_ai_response,
    render_change_line,
    resolve_period,
    to_iso,
    truncate_for_prompt,
)

UTC = timezone.utc


def _line(**overrides):
    values = dict(
        created_at=datetime(2025, 1, 1, 10, 0, tzinfo=UTC),
        competitor_name="Acme",
        page_type="PRICING",
        url="https://acme.example/pricing",
        change_type="TEXT",
        field="content",
        summary="Text content changed (length 100 → 180).",
    )
    values.update(overrides)
    return ChangeLine(**values)


def _provider(content=None, error=None):
    provider = MagicMock()
    provider.model_name = "gpt-test"
    provider.generate_text = AsyncMock(return_value=content, side_effect=error)
    return provider


AI_ANSWER = json.dumps({
    "summary": "Acme raised its Pro plan.",
    "highlights": [
        {
            "title": "Pro plan price increase",
            "detail": "Pro went from 49 € to 59 €.",
            "competitor": "Acme",
            "changeType": "PRICE",
            "impact": "HIGH",
        }
    ],
})


# ---------------------------------------------------------------------------
# Window resolution
# ---------------------------------------------------------------------------


class TestResolvePeriod:
    def test_only_start(self):
        start = datetime(2025, 1, 1, tzinfo=UTC)
        assert resolve_period(start, None) == (start, start + timedelta(days=7))

    def test_only_end(self):
        end = datetime(2025, 1, 8, tzinfo=UTC)
        assert resolve_period(None, end) == (end - timedelta(days=7), end)

    def test_neither_uses_now(self, fixed_now):
        assert resolve_period(None, None, now=fixed_now) == (fixed_now - timedelta(days=7), fixed_now)

    def test_reversed_bounds_are_swapped(self):
        a = datetime(2025, 1, 1, tzinfo=UTC)
        b = datetime(2025, 1, 3, tzinfo=UTC)
        assert resolve_period(b, a) == (a, b)

    def test_naive_taken_as_utc(self):
        start, _ = resolve_period(datetime(2025, 1, 1), None)
        assert start.tzinfo is UTC


# ---------------------------------------------------------------------------
# Prompt rendering
# ---------------------------------------------------------------------------


class TestPromptRendering:
    def test_to_iso(self):
        assert to_iso(datetime(2025, 1, 1, 10, 0, 0, 123456, tzinfo=UTC)) == "2025-01-01T10:00:00.123Z"
        assert to_iso(datetime(2025, 1, 1, 10, 0)) == "2025-01-01T10:00:00.000Z"

    def test_text_line(self):
        assert render_change_line(_line()) == (
            '[2025-01-01T10:00:00.000Z] Competitor="Acme" | PageType="PRICING" '
            '| ChangeType="TEXT" | Field="content" | URL="https://acme.example/pricing" '
            '| Summary="Text content changed (length 100 → 180)."'
        )

    def test_missing_field_is_na(self):
        assert 'Field="N/A"' in render_change_line(_line(field=None))

    def test_price_line_carries_pricing_json(self):
        rendered = render_change_line(_line(
            change_type="PRICE",
            field="pricing",
            old_value=None,
            new_value='[{"amount":59}]',
        ))
        assert rendered.endswith(' | OldPricingJson=null | NewPricingJson=[{"amount":59}]')

    def test_truncate_for_prompt(self):
        assert truncate_for_prompt("", 400) == "null"
        assert truncate_for_prompt("abc", 400) == "abc"
        assert truncate_for_prompt("x" * 401, 400) == "x" * 400 + "…"

    def test_prompt_is_capped(self):
        lines = [_line(summary=f"change {i}") for i in range(MAX_PROMPT_CHANGES + 20)]
        prompt = build_changes_prompt(lines)
        assert len(prompt.splitlines()) == MAX_PROMPT_CHANGES
        assert 'Summary="change 199"' in prompt
        assert 'Summary="change 200"' not in prompt

    def test_empty_prompt(self):
        assert build_changes_prompt([]) == NO_CHANGES_SUMMARY

    def test_user_prompt_context(self):
        prompt = build_user_prompt(
            "Acme watch", "  ", datetime(2025, 1, 1, tzinfo=UTC), datetime(2025, 1, 8, tzinfo=UTC), [_line()]
        )
        assert "- Project name: Acme watch" in prompt
        assert "- Description: No description provided." in prompt
        assert "from 2025-01-01 to 2025-01-08" in prompt
        assert 'Competitor="Acme"' in prompt


# ---------------------------------------------------------------------------
# AI output normalization
# ---------------------------------------------------------------------------


class TestParseAiResponse:
    def test_valid_answer(self):
        result = parse_ai_response(AI_ANSWER)
        assert result.ai_summary == "Acme raised its Pro plan."
        assert result.highlights == [{
            "title": "Pro plan price increase",
            "detail": "Pro went from 49 € to 59 €.",
            "competitor": "Acme",
            "changeType": "PRICE",
            "impact": "HIGH",
        }]

    def test_invalid_json(self):
        assert parse_ai_response("Here is your report: {") is None

    def test_non_object_json(self):
        assert parse_ai_response("[1, 2]") is None

    def test_missing_summary_gets_fallback(self):
        result = parse_ai_response('{"highlights": []}')
        assert result.ai_summary == AI_SUMMARY_UNAVAILABLE
        assert result.highlights == []

    def test_highlights_not_a_list(self):
        assert parse_ai_response('{"summary": "ok", "highlights": "none"}').highlights == []

    def test_highlight_fields_coerced(self):
        content = json.dumps({
            "summary": "ok",
            "highlights": [
                "not an object",
                {"title": 42, "impact": "medium", "changeType": "TEXT", "extra": True},
                {"title": "Odd impact", "impact": "URGENT"},
            ],
        })
        highlights = parse_ai_response(content).highlights
        assert highlights == [
            {"title": "", "detail": "", "competitor": "", "changeType": "TEXT", "impact": "MEDIUM"},
            {"title": "Odd impact", "detail": "", "competitor": "", "changeType": "", "impact": ""},
        ]


# ---------------------------------------------------------------------------
# Synthesis
# ---------------------------------------------------------------------------


PROJECT = SimpleNamespace(id=1, name="Acme watch", description="SaaS competitors")
START = datetime(2025, 1, 1, tzinfo=UTC)
END = datetime(2025, 1, 8, tzinfo=UTC)


class TestGenerateAiReport:
    async def test_no_changes_needs_no_provider(self):
        result = await generate_ai_report(None, PROJECT, START, END, [])
        assert result.ai_summary == NO_CHANGES_SUMMARY
        assert result.highlights == []

    async def test_no_provider(self):
        assert await generate_ai_report(None, PROJECT, START, END, [_line()]) is None

    async def test_asks_for_json(self):
        provider = _provider(AI_ANSWER)
        result = await generate_ai_report(provider, PROJECT, START, END, [_line()])

        assert result.ai_summary == "Acme raised its Pro plan."
        args, kwargs = provider.generate_text.call_args
        assert 'Competitor="Acme"' in args[0]
        assert kwargs["json_output"] is True
        assert kwargs["system_prompt"]

    async def test_provider_failure_degrades(self):
        provider = _provider(error=SynthesisUnavailable("quota exceeded"))
        assert await generate_ai_report(provider, PROJECT, START, END, [_line()]) is None

    async def test_unexpected_error_degrades(self):
        provider = _provider(error=RuntimeError("transport closed"))
        assert await generate_ai_report(provider, PROJECT, START, END, [_line()]) is None

    async def test_empty_answer_degrades(self):
        assert await generate_ai_report(_provider(""), PROJECT, START, END, [_line()]) is None

    async def test_timeout_degrades(self):
        async def slow(*args, **kwargs):
            await asyncio.sleep(1)
            return AI_ANSWER

        provider = _provider()
        provider.generate_text = slow
        with patch.object(settings, "llm_timeout_seconds", 0.01):
            assert await generate_ai_report(provider, PROJECT, START, END, [_line()]) is None


# ---------------------------------------------------------------------------
# Report persistence
# ---------------------------------------------------------------------------


@pytest.fixture
async def changes(db, project):
    """Two in-window changes (different competitors) and one outside the window."""
    acme = Competitor(project_id=project.id, name="Acme")
    globex = Competitor(project_id=project.id, name="Globex")
    db.add_all([acme, globex])
    await db.flush()

    acme_page = MonitoredPage(competitor_id=acme.id, url="https://acme.example/pricing", page_type=PageType.PRICING)
    globex_page = MonitoredPage(competitor_id=globex.id, url="https://globex.example/", page_type=PageType.LANDING)
    db.add_all([acme_page, globex_page])
    await db.flush()

    db.add_all([
        Change(
            monitored_page_id=acme_page.id,
            change_type=ChangeType.PRICE,
            field="pricing",
            old_value='[{"amount":49}]',
            new_value='[{"amount":59}]',
            change_summary="Pricing or plans changed on this page.",
            created_at=datetime(2025, 1, 3, 9, 0, tzinfo=UTC),
        ),
        Change(
            monitored_page_id=globex_page.id,
            change_type=ChangeType.TEXT,
            field="content",
            change_summary="Text content changed (length 900 → 1400).",
            created_at=datetime(2025, 1, 5, 9, 0, tzinfo=UTC),
        ),
        Change(
            monitored_page_id=globex_page.id,
            change_type=ChangeType.TEXT,
            field="content",
            change_summary="Old rewrite",
            created_at=datetime(2024, 12, 1, 9, 0, tzinfo=UTC),
        ),
    ])
    await db.commit()


class TestCreateReport:
    async def test_unknown_project(self, db):
        with pytest.raises(ProjectNotFound):
            await create_report(db, 999)

    async def test_no_changes_gets_fixed_summary(self, db, project, fixed_now):
        factory = MagicMock()
        report = await create_report(db, project.id, provider_factory=factory, now=fixed_now)

        factory.assert_not_called()
        assert report.ai_summary == NO_CHANGES_SUMMARY
        assert report.highlights == []
        assert report.period_start == fixed_now - timedelta(days=7)
        assert report.period_end == fixed_now
        assert report.generated_at == fixed_now

    async def test_synthesized_report(self, db, project, changes):
        provider = _provider(AI_ANSWER)
        report = await create_report(db, project.id, START, END, provider_factory=lambda: provider)

        assert report.id is not None
        assert report.ai_summary == "Acme raised its Pro plan."
        assert report.highlights[0]["impact"] == "HIGH"

        prompt = provider.generate_text.call_args.args[0]
        assert prompt.index('Competitor="Acme"') < prompt.index('Competitor="Globex"')
        assert "NewPricingJson=[{\"amount\":59}]" in prompt
        assert "Old rewrite" not in prompt

    async def test_missing_credentials_still_creates_report(self, db, project, changes):
        report = await create_report(db, project.id, START, END, provider_factory=lambda: None)

        assert report.id is not None
        assert report.ai_summary is None
        assert report.highlights == []

    async def test_use_ai_false_skips_synthesis(self, db, project, changes):
        factory = MagicMock()
        report = await create_report(db, project.id, START, END, use_ai=False, provider_factory=factory)

        factory.assert_not_called()
        assert report.ai_summary is None

    async def test_provider_failure_still_creates_report(self, db, project, changes):
        provider = _provider(error=SynthesisUnavailable("503"))
        report = await create_report(db, project.id, START, END, provider_factory=lambda: provider)

        assert report.id is not None
        assert report.ai_summary is None

    async def test_default_factory_is_ai_factory(self, db, project, changes):
        with patch("workers.briefing.generator.AIFactory.create", return_value=None) as create:
            await create_report(db, project.id, START, END)
        create.assert_called_once_with()

    async def test_unexpected_provider_error_still_creates_report(self, db, project, changes):
        provider = _provider(error=RuntimeError("transport closed"))
        report = await create_report(db, project.id, START, END, provider_factory=lambda: provider)

        assert report.id is not None
        assert report.ai_summary is None
        assert report.highlights == []

    async def test_window_bounds_are_inclusive(self, db, project, competitor, page):
        for created_at, summary in [
            (START - timedelta(microseconds=1), "just before"),
            (START, "at start"),
            (END, "at end"),
            (END + timedelta(microseconds=1), "just after"),
        ]:
            db.add(Change(
                monitored_page_id=page.id,
                change_type=ChangeType.TEXT,
                field="content",
                change_summary=summary,
                created_at=created_at,
            ))
        await db.commit()

        provider = _provider(AI_ANSWER)
        await create_report(db, project.id, START, END, provider_factory=lambda: provider)

        prompt = provider.generate_text.call_args.args[0]
        assert 'Summary="at start"' in prompt
        assert 'Summary="at end"' in prompt
        assert "just before" not in prompt
        assert "just after" not in prompt
