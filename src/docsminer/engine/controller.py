"""Entry point for hosts: start, stop and branch discovery messages."""

import logging
from pathlib import Path
from typing import Any, Mapping, Optional

from docsminer.core.interfaces import ProgressReporter
from docsminer.core.models import CrawlConfig, CrawlMethod, CrawlRequest, RunStats, StatusEvent
from docsminer.engine.crawler import DocsCrawler
from docsminer.engine.progress import NullReporter
from docsminer.github.walker import GithubTreeWalker
from docsminer.storage.filesystem import MarkdownFileSink, derive_output_path

logger = logging.getLogger(__name__)


class CrawlController:
    """Owns the active crawler of a host and relays its messages.

    Only one crawl is active at a time: starting a new one stops the
    previous crawler, which winds down after its item in flight.
    """

    def __init__(
        self,
        workspace: Path,
        reporter: Optional[ProgressReporter] = None,
        config: Optional[CrawlConfig] = None,
    ) -> None:
        """Initialize the controller.

        Args:
            workspace: Root directory for output documents.
            reporter: Receiver of progress events.
            config: Crawl configuration for every run.
        """
        self._workspace = Path(workspace)
        self._reporter = reporter or NullReporter()
        self._config = config or CrawlConfig()
        self._crawler: Optional[DocsCrawler] = None

    @property
    def crawler(self) -> Optional[DocsCrawler]:
        return self._crawler

    def build_request(self, message: Mapping[str, Any]) -> CrawlRequest:
        """Turn a start message into a crawl request.

        The message follows the start contract: ``startUrl``, ``maxDepth``,
        ``method`` and the optional ``outputFolder``, ``outputFileName`` and
        ``branch``.
        """
        start_url = str(message["startUrl"]).strip()
        output_file = derive_output_path(
            start_url,
            self._workspace,
            output_folder=message.get("outputFolder") or None,
            output_file_name=message.get("outputFileName") or None,
        )
        return CrawlRequest(
            start_url=start_url,
            max_depth=int(message["maxDepth"]),
            method=CrawlMethod(message.get("method") or CrawlMethod.API.value),
            output_file=output_file,
            branch=message.get("branch") or None,
        )

    def create_crawler(self, request: CrawlRequest) -> DocsCrawler:
        """Create the crawler for a request, superseding any active one."""
        if request.output_file is None:
            raise ValueError(f"No output file for crawl of {request.start_url}")

        if self._crawler is not None:
            self._crawler.stop()

        self._crawler = DocsCrawler(
            request,
            MarkdownFileSink(request.output_file),
            reporter=self._reporter,
            config=self._config,
        )
        return self._crawler

    async def start(self, message: Mapping[str, Any]) -> RunStats:
        """Handle a start message and run the crawl to its end."""
        request = self.build_request(message)
        logger.info("Starting %s crawl of %s", request.method.value, request.start_url)
        crawler = self.create_crawler(request)
        return await crawler.run()

    def stop(self) -> None:
        """Handle a stop message."""
        if self._crawler is None:
            return
        self._crawler.stop()
        self._reporter.emit(
            StatusEvent(message="Stopping crawl... Please wait for current page to finish.")
        )

    async def discover_branches(self, url: str) -> dict[str, Any]:
        """Handle a branch discovery message for a repository URL."""
        async with GithubTreeWalker(self._config) as walker:
            listing = await walker.list_branches(url)
        return listing.to_message()
