"""
Web Monitor Orchestrator — on-demand capture run
=================================================
Runs one capture for one monitored page:
1. Loads the page, closes the read transaction and takes the per-page guard
2. Downloads HTML (single uncached GET)
3. Normalizes it and extracts pricing (loose text pass)
4. Reads the latest previous snapshot
5. Saves the new Snapshot
6. Runs the Diff Engine against the previous snapshot

Snapshot and Change rows are committed together; a failed fetch
writes nothing.
"""

from __future__ import annotations

import asyncio
import logging
import weakref

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import PageNotFound, PersistenceFailure
from core.models import MonitoredPage
from core.repository import WatchRepository
from workers.diff_engine.analyzer import analyze_changes, select_representative
from workers.web_monitor.extractor_factory import ExtractorFactory
from workers.web_monitor.fetcher import fetch_page_html
from workers.web_monitor.models import CaptureOutcome, PricingSource, ScrapeResult
from workers.web_monitor.normalizer import clean_html_to_text

logger = logging.getLogger(__name__)

# In-process guard; PostgreSQL additionally gets a transaction-scoped advisory lock.
# An entry lives only while some run holds a reference to its lock.
_page_locks: weakref.WeakValueDictionary[int, asyncio.Lock] = weakref.WeakValueDictionary()


def _page_lock(page_id: int) -> asyncio.Lock:
    lock = _page_locks.get(page_id)
    if lock is None:
        lock = _page_locks[page_id] = asyncio.Lock()
    return lock


async def scrape_page(url: str, pricing_source: PricingSource = PricingSource.TEXT) -> ScrapeResult:
    """Fetch → normalize → extract pricing. Raises FetchFailure."""
    raw_html = await fetch_page_html(url)
    extracted_text = clean_html_to_text(raw_html)

    content = extracted_text if pricing_source is PricingSource.TEXT else raw_html
    pricing = ExtractorFactory.create(pricing_source, content).extract()

    return ScrapeResult(raw_html=raw_html, extracted_text=extracted_text, pricing=pricing)


async def _acquire_advisory_lock(session: AsyncSession, page_id: int) -> None:
    if session.get_bind().dialect.name == "postgresql":
        await session.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": page_id})


async def capture_page(session: AsyncSession, page_id: int) -> CaptureOutcome:
    """
    Capture a monitored page and record what changed since the last capture.

    The session's read transaction is committed before the download so
    no connection stays idle in transaction during network I/O.

    Raises PageNotFound, FetchFailure (nothing persisted) or
    PersistenceFailure (transaction rolled back).
    """
    repo = WatchRepository(session)

    page = await session.get(MonitoredPage, page_id)
    if page is None:
        raise PageNotFound(page_id)
    url = page.url
    await session.commit()

    lock = _page_lock(page_id)
    async with lock:
        logger.info("Capturing page #%d: %s", page_id, url)

        # Fetch before any write: a failed download persists nothing
        scraped = await scrape_page(url)
        logger.info(
            "  Extracted %d chars of text, %d priced items",
            len(scraped.extracted_text),
            len(scraped.pricing),
        )

        try:
            await _acquire_advisory_lock(session, page_id)
            previous = await repo.find_latest_snapshot(page_id)

            snapshot = await repo.create_snapshot(
                page_id,
                raw_html=scraped.raw_html,
                extracted_text=scraped.extracted_text,
                extracted_pricing=scraped.pricing_json,
            )
            changes = list(await analyze_changes(repo, previous, snapshot))
            await session.commit()
        except SQLAlchemyError as exc:
            await session.rollback()
            logger.error("Failed to persist capture for page #%d: %s", page_id, exc)
            raise PersistenceFailure(f"Could not persist capture for page {page_id}") from exc

    outcome = CaptureOutcome(
        snapshot=snapshot,
        changes=changes,
        change=select_representative(changes),
    )
    logger.info("  Snapshot #%d saved: %s", snapshot.id, outcome.message)
    return outcome
