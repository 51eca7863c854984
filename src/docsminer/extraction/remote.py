"""Extraction through a remote Markdown rendering service.

The service (r.jina.ai by default) renders the page on its side and returns
Markdown, so no local HTML cleanup is needed.
"""

import logging
from typing import Optional

import httpx

from docsminer.core.exceptions import ExtractionError, ExtractionFailure
from docsminer.core.interfaces import ExtractionStrategy
from docsminer.core.models import CrawlConfig

logger = logging.getLogger(__name__)


class RemoteRenderStrategy(ExtractionStrategy):
    """Fetch pages as Markdown from a rendering endpoint."""

    def __init__(
        self,
        config: Optional[CrawlConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """Initialize the strategy.

        Args:
            config: Crawl configuration (endpoint, timeout, delay).
            client: Shared HTTP client. A private one is created if omitted.
        """
        self._config = config or CrawlConfig()
        self._client = client
        self._owns_client = client is None

    @property
    def name(self) -> str:
        return "api"

    @property
    def request_delay(self) -> float:
        return self._config.request_delay

    def render_url(self, url: str) -> str:
        return f"{self._config.render_endpoint}{url}"

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(follow_redirects=True)
        return self._client

    async def open(self) -> None:
        self._get_client()

    async def close(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def fetch_and_normalize(self, url: str) -> str:
        """Fetch the rendered Markdown for a URL.

        Raises:
            ExtractionError: On timeout, transport failure or non-2xx reply.
        """
        try:
            response = await self._get_client().get(
                self.render_url(url),
                timeout=self._config.timeout,
                headers={"Accept": "text/markdown"},
            )
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise ExtractionError(url, ExtractionFailure.TIMEOUT, str(e) or None) from e
        except httpx.HTTPStatusError as e:
            raise ExtractionError(
                url,
                ExtractionFailure.REMOTE,
                f"HTTP {e.response.status_code}",
            ) from e
        except (httpx.RequestError, httpx.InvalidURL) as e:
            raise ExtractionError(url, ExtractionFailure.NETWORK, str(e) or None) from e

        logger.debug("Rendered %s via %s (%d chars)", url, self.name, len(response.text))
        return response.text
