"""Crawl orchestration.

A run either walks a website breadth-first from the start URL or, for
github.com URLs, walks the repository tree. Every page or file is appended
to the output document as soon as it is processed, so a stopped or failed
run keeps everything gathered so far.
"""

import asyncio
import logging
from collections import deque
from datetime import datetime
from typing import Any, Awaitable, Callable, Optional
from urllib.parse import urlparse

import httpx

from docsminer.core.exceptions import (
    CrawlError,
    ExtractionError,
    InvalidUrlError,
    SinkError,
)
from docsminer.core.interfaces import ExtractionStrategy, OutputSink, ProgressReporter
from docsminer.core.models import (
    CheckAutoOpenEvent,
    CrawlConfig,
    CrawlRequest,
    CrawlState,
    FrontierEntry,
    ProgressEvent,
    RunStats,
    StatusEvent,
)
from docsminer.discovery.links import LinkExtractor
from docsminer.discovery.scope import ScopePolicy
from docsminer.engine.progress import NullReporter
from docsminer.extraction.factory import create_strategy
from docsminer.github.urls import is_github_url, parse_github_url
from docsminer.github.walker import GithubTreeWalker, filter_entries, relative_depth

logger = logging.getLogger(__name__)


class DocsCrawler:
    """Run one crawl request to completion, failure or stop."""

    def __init__(
        self,
        request: CrawlRequest,
        sink: OutputSink,
        reporter: Optional[ProgressReporter] = None,
        config: Optional[CrawlConfig] = None,
        strategy: Optional[ExtractionStrategy] = None,
        walker: Optional[GithubTreeWalker] = None,
        link_extractor: Optional[LinkExtractor] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """Initialize the crawler.

        Args:
            request: What to crawl.
            sink: Output document.
            reporter: Receiver of progress events.
            config: Crawl configuration.
            strategy: Extraction strategy. Created from ``request.method``
                if omitted.
            walker: GitHub tree walker. Created on demand if omitted.
            link_extractor: Link discovery. Created on demand if omitted.
            sleep: Coroutine used for the pause between requests.
        """
        self._request = request
        self._sink = sink
        self._reporter = reporter or NullReporter()
        self._config = config or CrawlConfig()
        self._strategy = strategy
        self._walker = walker
        self._link_extractor = link_extractor
        self._sleep = sleep

        self._state = CrawlState.IDLE
        self._stop_requested = False
        self._visited: set[str] = set()
        self._planned: set[str] = set()
        self._stats = self._new_stats()

    @property
    def state(self) -> CrawlState:
        return self._state

    @property
    def stats(self) -> RunStats:
        return self._stats

    @property
    def stop_requested(self) -> bool:
        return self._stop_requested

    def stop(self) -> None:
        """Ask the run to stop after the item in flight."""
        self._stop_requested = True
        if self._state == CrawlState.RUNNING:
            self._state = CrawlState.STOPPING

    async def run(self) -> RunStats:
        """Run the crawl.

        Returns:
            Statistics of the run. Check ``state`` for how it ended.

        Raises:
            SinkError: If the output document cannot be written.
        """
        self._stop_requested = False
        self._state = CrawlState.RUNNING
        self._visited.clear()
        self._planned.clear()
        self._stats = self._new_stats()

        try:
            self._sink.ensure_exists()
            if is_github_url(self._request.start_url):
                await self._walk_repository()
            else:
                await self._crawl_website()
        except CrawlError as e:
            self._fail(e)
            return self._stats
        except SinkError as e:
            self._state = CrawlState.FAILED
            self._status(f"Error: {e}", is_error=True)
            raise

        self._finish()
        return self._stats

    def _new_stats(self) -> RunStats:
        return RunStats(
            source=self._request.start_url,
            method=self._request.method,
            max_depth=self._request.max_depth,
        )

    # ------------------------------------------------------------------
    # Website crawl
    # ------------------------------------------------------------------

    async def _crawl_website(self) -> None:
        start_url = self._request.start_url
        max_depth = self._request.max_depth

        parsed = urlparse(start_url)
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            raise InvalidUrlError(start_url, "expected an absolute http(s) URL")
        try:
            parsed.port
        except ValueError as e:
            raise InvalidUrlError(start_url, str(e)) from e

        self._sink.append_header(f"# Source: {start_url}")
        policy = ScopePolicy.for_start_url(start_url, max_depth)

        queue: deque[FrontierEntry] = deque([FrontierEntry(url=start_url, depth=0)])
        self._planned.add(start_url)

        self._status(f"Starting crawl from {start_url} with depth {max_depth}")

        strategy = self._strategy or create_strategy(self._request.method, self._config)
        links = self._link_extractor or LinkExtractor(timeout=self._config.timeout)

        try:
            async with strategy:
                while queue and not self._stop_requested:
                    entry = queue.popleft()
                    if entry.url in self._visited or entry.depth >= max_depth:
                        continue

                    self._visited.add(entry.url)
                    self._stats.processed = len(self._visited)
                    self._status(
                        f"[{len(self._visited)}/{len(self._planned)}] {entry.url}\n"
                        f"Depth: {entry.depth + 1}/{max_depth}"
                    )

                    try:
                        content = await strategy.fetch_and_normalize(entry.url)
                    except ExtractionError as e:
                        self._record_error(entry.url, e)
                        continue

                    self._sink.append_page(entry.url, content)

                    # The last depth level is written but never expanded
                    if entry.depth < max_depth - 1:
                        await self._expand(entry, links, policy, queue)

                    if strategy.request_delay > 0:
                        await self._sleep(strategy.request_delay)
        finally:
            if self._link_extractor is None:
                await links.close()

        self._stats.total_discovered = len(self._planned)

        if self._stop_requested:
            self._status(f"Crawling stopped by user. Processed {self._stats.processed} pages.")
        else:
            elapsed = self._stats.duration_seconds
            self._status(
                f"Completed! Processed {self._stats.processed} pages in {elapsed:.1f} seconds."
            )

    async def _expand(
        self,
        entry: FrontierEntry,
        links: LinkExtractor,
        policy: ScopePolicy,
        queue: deque[FrontierEntry],
    ) -> None:
        """Enqueue the in-scope links of a page that are not planned yet."""
        self._status(f"Finding links in {entry.url}...")

        new_links = 0
        for link in await links.fetch_links(entry.url):
            if link in self._visited or link in self._planned:
                continue
            if not policy.is_in_scope(link):
                continue
            queue.append(FrontierEntry(url=link, depth=entry.depth + 1))
            self._planned.add(link)
            new_links += 1

        self._stats.total_discovered = len(self._planned)
        self._status(f"Found {new_links} new links in {entry.url}")

    # ------------------------------------------------------------------
    # GitHub walk
    # ------------------------------------------------------------------

    async def _walk_repository(self) -> None:
        target = parse_github_url(self._request.start_url)
        max_depth = self._request.max_depth
        walker = self._walker or GithubTreeWalker(self._config)

        try:
            branch = await walker.resolve_branch(target, self._request.branch)
            self._stats.repository = target.full_name
            self._stats.branch = branch

            self._sink.append_header(
                f"# Repository: {target.full_name}", f"## Branch: {branch}"
            )
            self._status(f"Starting GitHub repository crawl: \n{target.full_name}")

            files = await walker.list_files(target, branch)
            entries = filter_entries(files, target, max_depth)
            self._stats.total_discovered = len(entries)
            self._status(f"Found {len(entries)} files to process within depth {max_depth}")

            for index, entry in enumerate(entries, 1):
                if self._stop_requested:
                    break

                self._stats.processed = index
                self._status(
                    f"[{index}/{len(entries)}] {entry.path}\n"
                    f"Depth: {relative_depth(entry, target)}/{max_depth}"
                )

                try:
                    file = await walker.read_entry(target, branch, entry)
                except httpx.HTTPError as e:
                    self._record_error(entry.path, e)
                    continue

                self._sink.append_file(file)
        finally:
            if self._walker is None:
                await walker.close()

        total = self._stats.total_discovered
        if self._stop_requested:
            self._status(
                "Crawling stopped by user. \n"
                f"Processed {self._stats.processed} of {total} files."
            )
        else:
            elapsed = self._stats.duration_seconds
            self._status(
                f"Completed! \nProcessed {self._stats.processed} of {total} files "
                f"in {elapsed:.1f} seconds."
            )

    # ------------------------------------------------------------------
    # Outcome handling
    # ------------------------------------------------------------------

    def _record_error(self, subject: str, error: Exception) -> None:
        """Write an error section for one item and carry on."""
        logger.warning("Error processing %s: %s", subject, error)
        self._sink.append_error(subject, str(error))
        self._status(f"Error processing {subject}: {error}", is_error=True)

    def _fail(self, error: CrawlError) -> None:
        logger.error("Crawl of %s failed: %s", self._request.start_url, error)
        self._stats.ended_at = datetime.now()
        self._state = CrawlState.FAILED
        self._sink.append_error(self._request.start_url, str(error))
        self._status(f"Error: {error}", is_error=True)

    def _finish(self) -> None:
        self._stats.ended_at = datetime.now()
        self._sink.append_stats(self._stats)
        self._state = CrawlState.COMPLETED
        self._emit(CheckAutoOpenEvent(file_path=str(self._sink.path)))

    def _status(self, message: str, is_error: bool = False) -> None:
        self._emit(StatusEvent(message=message, is_error=is_error))

    def _emit(self, event: ProgressEvent) -> None:
        try:
            self._reporter.emit(event)
        except Exception:
            logger.exception("Progress reporter failed on %r", event)
