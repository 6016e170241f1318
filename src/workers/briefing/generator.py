"""
Briefing Engine — AI-assisted watch reports.

Consolidates a project's Change records over a period into a Report:
a natural-language summary and structured highlights produced by an
LLM. The report is always created; when the LLM is not configured or
fails, the AI fields are left empty.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from sqlalchemy.ext.asyncio import AsyncSession

from core.ai.base import BaseAIProvider
from core.ai.factory import AIFactory
from core.config import settings
from core.errors import ProjectNotFound, SynthesisUnavailable
from core.models import Change, ChangeType, Impact, Project, Report
from core.repository import WatchRepository

logger = logging.getLogger(__name__)

DEFAULT_PERIOD = timedelta(days=7)
MAX_PROMPT_CHANGES = 200
MAX_PRICING_JSON_LENGTH = 400

NO_CHANGES_SUMMARY = "No changes detected on monitored pages during this period."
AI_SUMMARY_UNAVAILABLE = "AI summary unavailable."

SYSTEM_PROMPT = (
    "You are a competitive intelligence assistant for a B2B marketing team. "
    "You analyse the changes detected on competitors' websites (pricing, offers, content) "
    "and write a concise report a marketing decision-maker can act on. "
    "Clearly identify price movements, new products or plans, messaging changes "
    "(slogans, headlines, key sections) and visible technical problems."
)

# ── Period resolution ─────────────────────────────────────────────────

def _as_utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def resolve_period(
    period_start: datetime | None,
    period_end: datetime | None,
    now: datetime | None = None,
) -> tuple[datetime, datetime]:
    """
    Turn optional bounds into a concrete inclusive window.

    Only start → [start, start + 7d]; only end → [end - 7d, end];
    neither → [now - 7d, now]. Reversed bounds are swapped.
    Naive datetimes are taken as UTC.
    """
    period_start = _as_utc(period_start)
    period_end = _as_utc(period_end)
    if period_start is not None and period_end is None:
        period_end = period_start + DEFAULT_PERIOD
    elif period_start is None and period_end is not None:
        period_start = period_end - DEFAULT_PERIOD
    elif period_start is None and period_end is None:
        period_end = now or datetime.now(timezone.utc)
        period_start = period_end - DEFAULT_PERIOD

    if period_start > period_end:  # type: ignore[operator]
        period_start, period_end = period_end, period_start
    return period_start, period_end


# ── Prompt building ───────────────────────────────────────────────────

@dataclass(frozen=True, slots=True)
class ChangeLine:
    """Flattened view of a Change joined with its page and competitor."""

    created_at: datetime
    competitor_name: str
    page_type: str
    url: str
    change_type: str
    field: str | None
    summary: str | None
    old_value: str | None = None
    new_value: str | None = None

    @classmethod
    def from_change(cls, change: Change) -> ChangeLine:
        page = change.page
        return cls(
            created_at=change.created_at,
            competitor_name=page.competitor.name,
            page_type=_enum_value(page.page_type),
            url=page.url,
            change_type=_enum_value(change.change_type),
            field=change.field,
            summary=change.change_summary,
            old_value=change.old_value,
            new_value=change.new_value,
        )


def _enum_value(value: Any) -> str:
    return value.value if hasattr(value, "value") else str(value)


def to_iso(value: datetime) -> str:
    """UTC ISO-8601 with milliseconds and a Z suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    utc = value.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def truncate_for_prompt(value: str | None, max_length: int) -> str:
    if not value:
        return "null"
    if len(value) <= max_length:
        return value
    return value[:max_length] + "…"


def render_change_line(line: ChangeLine) -> str:
    rendered = (
        f'[{to_iso(line.created_at)}] Competitor="{line.competitor_name}" '
        f'| PageType="{line.page_type}" | ChangeType="{line.change_type}" '
        f'| Field="{line.field or "N/A"}" | URL="{line.url}" | Summary="{line.summary or ""}"'
    )
    if line.change_type == ChangeType.PRICE.value:
        old_preview = truncate_for_prompt(line.old_value, MAX_PRICING_JSON_LENGTH)
        new_preview = truncate_for_prompt(line.new_value, MAX_PRICING_JSON_LENGTH)
        rendered += f" | OldPricingJson={old_preview} | NewPricingJson={new_preview}"
    return rendered


def build_changes_prompt(lines: Sequence[ChangeLine]) -> str:
    """One line per change, oldest first, capped to MAX_PROMPT_CHANGES."""
    if not lines:
        return NO_CHANGES_SUMMARY
    return "\n".join(render_change_line(line) for line in lines[:MAX_PROMPT_CHANGES])


def build_user_prompt(
    project_name: str,
    project_description: str | None,
    period_start: datetime,
    period_end: datetime,
    lines: Sequence[ChangeLine],
) -> str:
    description = (
        project_description
        if project_description and project_description.strip()
        else "No description provided."
    )
    return "\n".join([
        "Project context:",
        f"- Project name: {project_name}",
        f"- Description: {description}",
        "",
        f"Analysed period: from {to_iso(period_start)[:10]} to {to_iso(period_end)[:10]}.",
        "",
        "Detected changes (one line per change):",
        'Each line follows the format: [date] Competitor="..." | PageType="..." '
        '| ChangeType="..." | Field="..." | URL="..." | Summary="..."',
        "",
        build_changes_prompt(lines),
        "",
        "Task:",
        "1) Write an overall summary (5 to 10 lines at most) of the competitive moves over the period.",
        "2) List 3 to 8 highlights as structured objects.",
        "",
        "Highlights should cover first:",
        "- price changes (increases/decreases, plans appearing or disappearing),",
        "- new products / new offers,",
        "- major messaging changes (new slogan, new hook, large rewrite),",
        "- technical problems visible in the summaries (page unavailable, error, empty content).",
        "",
        "STRICT JSON output format (no text outside the JSON):",
        "{",
        '  "summary": "string, overall summary",',
        '  "highlights": [',
        "    {",
        '      "title": "string, very short (e.g. \\"Base plan price increase\\")",',
        '      "detail": "string, 1 to 3 sentences explaining the change and its business meaning",',
        '      "competitor": "competitor name",',
        '      "changeType": "TEXT | PRICE | SECTION_ADDED | SECTION_REMOVED | OTHER",',
        '      "impact": "HIGH | MEDIUM | LOW"',
        "    }",
        "  ]",
        "}",
        "",
        "IMPORTANT:",
        "- Use the figures present in the data (old/new prices) when available.",
        '- When a new product/plan clearly appears, give it a dedicated highlight (title starting with "New product" or "New plan").',
        '- When an offer disappears, give it a dedicated highlight (title like "Plan removed").',
        "- When the main content or message changes a lot, add a TEXT highlight.",
        "- If you detect problems (error, empty content, ...), add an OTHER highlight, impact HIGH when critical.",
        "",
        "Do not comment the JSON. Do not write anything before or after the JSON.",
    ])


# ── Output normalization ──────────────────────────────────────────────

class Highlight(BaseModel):
    """One structured fact of a report; malformed fields become empty strings."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = ""
    detail: str = ""
    competitor: str = ""
    change_type: str = Field(default="", alias="changeType")
    impact: str = ""

    @field_validator("title", "detail", "competitor", "change_type", "impact", mode="before")
    @classmethod
    def _only_strings(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""

    @field_validator("impact")
    @classmethod
    def _known_impact(cls, value: str) -> str:
        upper = value.strip().upper()
        return upper if upper in Impact.__members__ else ""


@dataclass(frozen=True, slots=True)
class AiReportResult:
    ai_summary: str
    highlights: list[dict[str, str]]


def parse_ai_response(content: str) -> AiReportResult | None:
    """Parse the model's JSON answer; None when it is not a JSON object."""
    try:
        parsed = json.loads(content)
    except json.JSONDecodeError as exc:
        logger.error("Error parsing AI JSON: %s", exc)
        return None
    if not isinstance(parsed, dict):
        logger.error("AI JSON is not an object (%s)", type(parsed).__name__)
        return None

    summary = parsed.get("summary")
    if not isinstance(summary, str) or not summary.strip():
        summary = AI_SUMMARY_UNAVAILABLE

    raw_highlights = parsed.get("highlights")
    if not isinstance(raw_highlights, list):
        raw_highlights = []

    highlights: list[dict[str, str]] = []
    for item in raw_highlights:
        if not isinstance(item, dict):
            continue
        try:
            highlights.append(Highlight.model_validate(item).model_dump(by_alias=True))
        except ValidationError as exc:
            logger.debug("Dropping malformed highlight %r: %s", item, exc)

    return AiReportResult(ai_summary=summary, highlights=highlights)


# ── Synthesis ─────────────────────────────────────────────────────────

async def generate_ai_report(
    provider: BaseAIProvider | None,
    project: Project,
    period_start: datetime,
    period_end: datetime,
    lines: Sequence[ChangeLine],
) -> AiReportResult | None:
    """
    Ask the LLM for a summary + highlights.

    Returns None when synthesis is unavailable or failed; never raises
    because of the provider.
    """
    if not lines:
        return AiReportResult(ai_summary=NO_CHANGES_SUMMARY, highlights=[])

    if provider is None:
        logger.warning("AI provider not configured, skipping synthesis for project %d", project.id)
        return None

    user_prompt = build_user_prompt(project.name, project.description, period_start, period_end, lines)
    logger.info("Using AI (%s) for report on project %d (%d changes)", provider.model_name, project.id, len(lines))

    try:
        content = await asyncio.wait_for(
            provider.generate_text(user_prompt, system_prompt=SYSTEM_PROMPT, json_output=True),
            timeout=settings.llm_timeout_seconds,
        )
    except SynthesisUnavailable as exc:
        logger.error("AI report failed: %s", exc)
        return None
    except asyncio.TimeoutError:
        logger.error("AI report timed out after %.0fs", settings.llm_timeout_seconds)
        return None
    except Exception:
        # Synthesis never blocks report creation
        logger.exception("AI report failed")
        return None

    if not content:
        logger.error("Empty AI response.")
        return None

    return parse_ai_response(content)


async def create_report(
    session: AsyncSession,
    project_id: int,
    period_start: datetime | None = None,
    period_end: datetime | None = None,
    *,
    use_ai: bool = True,
    provider_factory: Callable[[], BaseAIProvider | None] | None = None,
    now: datetime | None = None,
) -> Report:
    """
    Generate and persist a report for a project over a period.

    ``provider_factory`` builds the LLM provider (AIFactory.create by
    default); it is only called when there are changes to synthesize.
    """
    repo = WatchRepository(session)
    project = await repo.get_project(project_id)
    if project is None:
        raise ProjectNotFound(project_id)

    start, end = resolve_period(period_start, period_end, now=now)
    changes = await repo.list_changes_in_window(project_id, start, end)
    lines = [ChangeLine.from_change(change) for change in changes]

    ai_summary: str | None = None
    highlights: list[dict[str, str]] = []

    if use_ai:
        factory = provider_factory or AIFactory.create
        provider = factory() if lines else None
        result = await generate_ai_report(provider, project, start, end, lines)
        if result:
            ai_summary = result.ai_summary
            highlights = result.highlights

    report = await repo.create_report(
        project_id,
        period_start=start,
        period_end=end,
        generated_at=now or datetime.now(timezone.utc),
        ai_summary=ai_summary,
        highlights=highlights,
    )
    await session.commit()

    logger.info(
        "Generated report #%d for project %d: %s to %s (%d changes)",
        report.id, project_id, start.isoformat(), end.isoformat(), len(changes),
    )
    return report
