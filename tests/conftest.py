"""Pytest configuration and fixtures."""

import tempfile
from pathlib import Path
from typing import Callable, Optional

import httpx
import pytest

from docsminer.core.exceptions import ExtractionError, ExtractionFailure
from docsminer.core.interfaces import ExtractionStrategy
from docsminer.engine.progress import RecordingReporter
from docsminer.storage.filesystem import MarkdownFileSink


class FakeStrategy(ExtractionStrategy):
    """Strategy that serves canned Markdown and records its lifecycle."""

    def __init__(
        self,
        pages: Optional[dict[str, str]] = None,
        failing: Optional[set[str]] = None,
        on_fetch: Optional[Callable[[str, int], None]] = None,
    ) -> None:
        self.pages = pages or {}
        self.failing = failing or set()
        self.on_fetch = on_fetch
        self.fetched: list[str] = []
        self.opened = False
        self.closed = False

    @property
    def name(self) -> str:
        return "fake"

    async def open(self) -> None:
        self.opened = True

    async def close(self) -> None:
        self.closed = True

    async def fetch_and_normalize(self, url: str) -> str:
        self.fetched.append(url)
        if self.on_fetch:
            self.on_fetch(url, len(self.fetched))
        if url in self.failing:
            raise ExtractionError(url, ExtractionFailure.REMOTE, "HTTP 500")
        return self.pages.get(url, f"Content of {url}")


class FakeLinkExtractor:
    """Link discovery backed by a static link map."""

    def __init__(self, links: dict[str, list[str]]) -> None:
        self.links = links
        self.requested: list[str] = []

    async def fetch_links(self, url: str) -> list[str]:
        self.requested.append(url)
        return list(self.links.get(url, []))

    async def close(self) -> None:
        pass


def mock_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    """HTTP client that answers every request with ``handler``."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


async def no_sleep(seconds: float) -> None:
    return None


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def output_sink(temp_dir):
    """Output document inside the temporary directory."""
    return MarkdownFileSink(temp_dir / "out-docs.md")


@pytest.fixture
def reporter():
    return RecordingReporter()


@pytest.fixture
def sample_html():
    """Sample HTML content for testing."""
    return """
    <!DOCTYPE html>
    <html>
    <head>
        <title>Test Page | Docs</title>
        <script>window.dataLayer = []; gtag('config', 'x');</script>
    </head>
    <body>
        <nav>Navigation</nav>
        <header>Site Header</header>
        <main>
            <article>
                <h1>Test Page Title</h1>
                <p>This is some test content.</p>
                <img src="data:image/svg+xml;base64,PHN2Zz48L3N2Zz4=" alt="Logo">
                <pre><code class="language-python">print("hello")</code></pre>
                <a href="/docs/other-page">Link to other page</a>
            </article>
        </main>
        <footer>Footer</footer>
    </body>
    </html>
    """
