"""
Page fetcher — one uncached GET per capture run.

No retries and no JavaScript rendering: the body is returned verbatim,
size bounds are applied later by the normalizer.
"""

from __future__ import annotations

import logging

from curl_cffi.requests import AsyncSession as CurlSession, RequestsError

from core.config import settings
from core.errors import FetchFailure

logger = logging.getLogger(__name__)

ACCEPT_HTML = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"


def default_headers() -> dict[str, str]:
    return {
        "User-Agent": settings.scraper_user_agent,
        "Accept": ACCEPT_HTML,
        "Cache-Control": "no-cache",
        "Pragma": "no-cache",
    }


async def fetch_page_html(url: str, timeout: float | None = None) -> str:
    """
    Fetch a URL and return its body as text.

    Raises FetchFailure on transport errors and on non-2xx responses.
    """
    try:
        async with CurlSession(
            headers=default_headers(),
            timeout=timeout or settings.fetch_timeout_seconds,
        ) as client:
            response = await client.get(url)
    except RequestsError as exc:
        logger.warning("Failed to fetch %s: %s", url, exc)
        raise FetchFailure(url, reason=str(exc)) from exc

    if not 200 <= response.status_code < 300:
        logger.warning("Failed to fetch %s: HTTP %d", url, response.status_code)
        raise FetchFailure(url, status_code=response.status_code)

    return response.text
