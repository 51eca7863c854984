"""Exception hierarchy for docsminer."""

from enum import Enum
from typing import Optional


class DocsMinerError(Exception):
    """Base class for all docsminer errors."""


class CrawlError(DocsMinerError):
    """An error that aborts the whole run."""


class InvalidUrlError(CrawlError):
    """The start URL cannot be crawled."""

    def __init__(self, url: str, detail: str = "malformed URL") -> None:
        self.url = url
        self.detail = detail
        super().__init__(f"Invalid URL {url!r}: {detail}")


class RendererUnavailableError(CrawlError):
    """The headless browser could not be started."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Headless browser unavailable: {detail}")


class RepositoryFailure(Enum):
    """Why a repository could not be resolved."""

    NOT_FOUND = "not-found"
    ACCESS_DENIED = "access-denied"
    RATE_LIMITED = "rate-limited"
    NETWORK = "network"


class RepositoryError(CrawlError):
    """The repository, branch or tree could not be resolved."""

    def __init__(
        self, repository: str, reason: RepositoryFailure, detail: Optional[str] = None
    ) -> None:
        self.repository = repository
        self.reason = reason
        self.detail = detail
        message = f"Repository {repository}: {reason.value}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


class ExtractionFailure(Enum):
    """Why a page could not be extracted."""

    NETWORK = "network"
    TIMEOUT = "timeout"
    REMOTE = "remote"
    RENDER_FAILED = "render-failed"


class ExtractionError(DocsMinerError):
    """A single page failed to extract. Never fatal to the run."""

    def __init__(
        self, url: str, reason: ExtractionFailure, detail: Optional[str] = None
    ) -> None:
        self.url = url
        self.reason = reason
        self.detail = detail
        message = f"Failed to get content from {url}: {reason.value}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


class ContentNotReadyError(DocsMinerError):
    """Rendered page never got past an interstitial or stayed empty."""


class SinkError(DocsMinerError):
    """The output document could not be written."""
