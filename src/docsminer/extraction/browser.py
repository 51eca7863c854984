"""Extraction by rendering pages in a headless Chromium via Playwright.

Many documentation sites build their content client-side, so the raw HTML
served over plain HTTP is nearly empty. This strategy renders the page,
waits for real content to appear, and converts the result to Markdown.
"""

import asyncio
import logging
import random
import time
from typing import Any, Awaitable, Callable, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from docsminer.core.exceptions import (
    ContentNotReadyError,
    ExtractionError,
    ExtractionFailure,
    RendererUnavailableError,
)
from docsminer.core.interfaces import ExtractionStrategy
from docsminer.core.models import CrawlConfig
from docsminer.extraction.backoff import backoff_delay
from docsminer.extraction.fingerprint import random_fingerprint
from docsminer.processing.normalizer import MarkdownNormalizer

logger = logging.getLogger(__name__)

# Bot-check and challenge pages that stand in for the real content
INTERSTITIAL_MARKERS = (
    "Just a moment",
    "Checking your browser",
    "Verify you are human",
    "cf-browser-verification",
    "Attention Required",
    "Please enable JavaScript and cookies",
    "DDoS protection by",
)

LAUNCH_ARGS = [
    "--disable-blink-features=AutomationControlled",
    "--disable-dev-shm-usage",
    "--no-first-run",
    "--no-default-browser-check",
]

BODY_TEXT_SCRIPT = "() => document.body ? document.body.innerText : ''"

POLL_INTERVAL = 0.5


def has_interstitial(text: str) -> bool:
    return any(marker in text for marker in INTERSTITIAL_MARKERS)


class BrowserStrategy(ExtractionStrategy):
    """Render pages in a headless browser with retries and backoff."""

    def __init__(
        self,
        config: Optional[CrawlConfig] = None,
        normalizer: Optional[MarkdownNormalizer] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        rng: Optional[random.Random] = None,
    ) -> None:
        """Initialize the strategy.

        Args:
            config: Crawl configuration (timeouts, retries, backoff).
            normalizer: HTML to Markdown converter.
            sleep: Coroutine used for backoff pauses and readiness polling.
            rng: Random source for fingerprints and jitter.
        """
        self._config = config or CrawlConfig()
        self._normalizer = normalizer or MarkdownNormalizer()
        self._sleep = sleep
        self._rng = rng or random.Random()
        self._playwright: Any = None
        self._browser: Any = None

    @property
    def name(self) -> str:
        return "browser"

    async def open(self) -> None:
        """Start Playwright and launch Chromium if not running yet."""
        if self._browser is not None:
            return

        try:
            self._playwright = await async_playwright().start()
        except PlaywrightError as e:
            raise RendererUnavailableError(str(e)) from e

        try:
            self._browser = await self._playwright.chromium.launch(
                headless=self._config.headless,
                args=LAUNCH_ARGS,
            )
        except PlaywrightError as e:
            await self._stop_driver()
            raise RendererUnavailableError(str(e)) from e
        except BaseException:
            await self._stop_driver()
            raise
        logger.debug("Launched headless browser")

    async def _stop_driver(self) -> None:
        driver, self._playwright = self._playwright, None
        if driver is not None:
            await driver.stop()

    async def close(self) -> None:
        """Close the browser and stop Playwright."""
        browser, self._browser = self._browser, None
        driver, self._playwright = self._playwright, None
        try:
            if browser is not None:
                await browser.close()
        finally:
            if driver is not None:
                await driver.stop()
                logger.debug("Closed headless browser")

    async def fetch_and_normalize(self, url: str) -> str:
        """Render a page and convert it to Markdown.

        Each attempt uses a fresh fingerprint. Retries wait according to the
        exponential backoff schedule before navigating again.

        Raises:
            ExtractionError: After every attempt failed.
        """
        last_error: Optional[BaseException] = None

        for attempt in range(self._config.max_retries):
            if attempt > 0:
                delay = backoff_delay(
                    attempt,
                    base=self._config.backoff_base,
                    cap=self._config.backoff_cap,
                    jitter=self._config.backoff_jitter,
                    rng=self._rng,
                )
                logger.info(
                    "Retrying %s in %.1fs (attempt %d/%d)",
                    url,
                    delay,
                    attempt + 1,
                    self._config.max_retries,
                )
                await self._sleep(delay)

            try:
                html = await self._render(url)
            except (PlaywrightError, ContentNotReadyError) as e:
                logger.warning("Render attempt %d for %s failed: %s", attempt + 1, url, e)
                last_error = e
                continue

            return self._normalizer.render_page(html)

        raise ExtractionError(
            url,
            ExtractionFailure.RENDER_FAILED,
            str(last_error) if last_error else None,
        )

    async def _render(self, url: str) -> str:
        """Run one page lifecycle and return the rendered HTML."""
        await self.open()

        fingerprint = random_fingerprint(self._rng)
        context = await self._browser.new_context(**fingerprint.context_options())
        try:
            await context.add_init_script(fingerprint.init_script)
            page = await context.new_page()

            timeout_ms = self._config.navigation_timeout * 1000
            await page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)
            try:
                await page.wait_for_load_state("networkidle", timeout=timeout_ms)
            except PlaywrightError:
                # Long-polling sites never go idle; the content check decides
                logger.debug("Network never went idle on %s", url)

            await self._wait_for_content(page, url)
            return await page.content()
        finally:
            await context.close()

    async def _wait_for_content(self, page: Any, url: str) -> None:
        """Poll until the body has real content and no challenge page."""
        deadline = time.monotonic() + self._config.content_timeout
        text = ""

        while True:
            text = await page.evaluate(BODY_TEXT_SCRIPT) or ""
            blocked = has_interstitial(text)
            if len(text) > self._config.min_content_length and not blocked:
                return

            if time.monotonic() >= deadline:
                if blocked:
                    raise ContentNotReadyError(f"{url} is stuck behind a challenge page")
                raise ContentNotReadyError(
                    f"{url} rendered only {len(text)} characters of text"
                )

            await self._sleep(POLL_INTERVAL)
