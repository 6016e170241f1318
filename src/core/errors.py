"""Error taxonomy shared by the capture pipeline, the synthesizer and the API."""

from __future__ import annotations


class WatchError(Exception):
    """Base class for every error raised by the watch core."""


class FetchFailure(WatchError):
    """The page could not be retrieved (transport error or non-2xx status)."""

    def __init__(self, url: str, status_code: int | None = None, reason: str | None = None) -> None:
        self.url = url
        self.status_code = status_code
        if status_code is not None:
            message = f"Failed to fetch {url} (HTTP {status_code})"
        else:
            message = f"Failed to fetch {url}: {reason or 'transport error'}"
        super().__init__(message)


class PersistenceFailure(WatchError):
    """Storage was unreachable or rejected a write; nothing was committed."""


class SynthesisUnavailable(WatchError):
    """The text-generation provider is not configured or failed."""


class NotFound(WatchError):
    """A referenced entity does not exist."""


class PageNotFound(NotFound):
    def __init__(self, page_id: int) -> None:
        self.page_id = page_id
        super().__init__(f"Monitored page {page_id} not found")


class ProjectNotFound(NotFound):
    def __init__(self, project_id: int) -> None:
        self.project_id = project_id
        super().__init__(f"Project {project_id} not found")


class CompetitorNotFound(NotFound):
    def __init__(self, competitor_id: int) -> None:
        self.competitor_id = competitor_id
        super().__init__(f"Competitor {competitor_id} not found")
