"""Abstract interfaces for docsminer."""

from abc import ABC, abstractmethod
from pathlib import Path
from types import TracebackType
from typing import Optional

from docsminer.core.models import ProgressEvent, RepositoryFile, RunStats


class ExtractionStrategy(ABC):
    """Turns one URL into normalized Markdown.

    Strategies own their network resources and are used as async context
    managers so that those resources are released on every exit path.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the method name of this strategy."""
        ...

    @property
    def request_delay(self) -> float:
        """Seconds to wait after each page before the next request."""
        return 0.0

    @abstractmethod
    async def fetch_and_normalize(self, url: str) -> str:
        """Fetch a URL and return its content as Markdown.

        Args:
            url: Page to extract.

        Returns:
            Markdown text.

        Raises:
            ExtractionError: If the page could not be extracted.
        """
        ...

    async def open(self) -> None:
        """Acquire resources. Default: nothing to acquire."""

    async def close(self) -> None:
        """Release resources. Default: nothing to release."""

    async def __aenter__(self) -> "ExtractionStrategy":
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        await self.close()


class OutputSink(ABC):
    """Append-only destination for the crawl output."""

    @property
    @abstractmethod
    def path(self) -> Path:
        """Return the location of the output document."""
        ...

    @abstractmethod
    def ensure_exists(self) -> None:
        """Create an empty document if none exists. Never truncates."""
        ...

    @abstractmethod
    def append(self, text: str) -> None:
        """Append raw text to the document.

        Raises:
            SinkError: If the document cannot be written.
        """
        ...

    @abstractmethod
    def append_header(self, *lines: str) -> None:
        """Append the header identifying the crawl source."""
        ...

    @abstractmethod
    def append_page(self, url: str, content: str) -> None:
        """Append the section of one crawled page."""
        ...

    @abstractmethod
    def append_file(self, file: RepositoryFile) -> None:
        """Append the section of one repository file."""
        ...

    @abstractmethod
    def append_error(self, subject: str, message: str) -> None:
        """Append an error section in place of a page or file."""
        ...

    @abstractmethod
    def append_stats(self, stats: RunStats) -> None:
        """Append the terminal statistics section."""
        ...


class ProgressReporter(ABC):
    """One-way outbound port for progress events."""

    @abstractmethod
    def emit(self, event: ProgressEvent) -> None:
        """Deliver an event. Must not block the crawl."""
        ...
