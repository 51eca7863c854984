"""Link extraction from fetched HTML or Markdown pages."""

import logging
import re
from typing import Optional
from urllib.parse import urldefrag, urljoin, urlparse

import httpx
from bs4 import BeautifulSoup

from docsminer.extraction.fingerprint import DEFAULT_USER_AGENT

logger = logging.getLogger(__name__)

# Binary downloads are never worth crawling
SKIPPED_EXTENSIONS = (
    "pdf",
    "zip",
    "tar",
    "gz",
    "tgz",
    "bz2",
    "xz",
    "7z",
    "rar",
    "exe",
    "msi",
    "dmg",
    "pkg",
    "deb",
    "rpm",
    "doc",
    "docx",
    "xls",
    "xlsx",
    "ppt",
    "pptx",
)

_SKIPPED_EXTENSION_RE = re.compile(
    r"\.(?:%s)$" % "|".join(SKIPPED_EXTENSIONS), re.IGNORECASE
)

# [text](target "optional title"), but not ![alt](image)
_MARKDOWN_LINK_RE = re.compile(r"(?<!!)\[[^\]]*\]\(\s*<?([^)\s>]+)>?(?:\s+\"[^\"]*\")?\s*\)")


def is_followable_href(href: str) -> bool:
    """Check if a raw href is worth resolving."""
    href = href.strip()
    if not href or href.startswith("#"):
        return False
    if href.lower().startswith("javascript:"):
        return False
    path = href.split("#", 1)[0].split("?", 1)[0]
    return not _SKIPPED_EXTENSION_RE.search(path)


def resolve_href(href: str, page_url: str) -> Optional[str]:
    """Resolve an href against its page. Returns None for non-http(s) results."""
    try:
        absolute = urljoin(page_url, href.strip())
        absolute, _fragment = urldefrag(absolute)
        parsed = urlparse(absolute)
        # Raises on a malformed port, which urlparse alone accepts
        parsed.port
    except ValueError:
        return None

    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return None
    return absolute


def extract_links(content: str, page_url: str, markdown: bool = False) -> list[str]:
    """Extract absolute candidate URLs from a page.

    Args:
        content: Page body (HTML, or Markdown when ``markdown`` is set).
        page_url: URL the content was fetched from.
        markdown: Parse Markdown link syntax instead of HTML anchors.

    Returns:
        De-duplicated absolute URLs in first-seen order.
    """
    if markdown:
        hrefs = [match.group(1) for match in _MARKDOWN_LINK_RE.finditer(content)]
    else:
        soup = BeautifulSoup(content, "html.parser")
        hrefs = [str(a["href"]) for a in soup.find_all("a", href=True)]

    links: dict[str, None] = {}
    for href in hrefs:
        if not is_followable_href(href):
            continue
        absolute = resolve_href(href, page_url)
        if absolute:
            links.setdefault(absolute, None)

    return list(links)


class LinkExtractor:
    """Fetch a page and list the links it contains."""

    def __init__(
        self,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        """Initialize the extractor.

        Args:
            timeout: Request timeout in seconds.
            client: Shared HTTP client. A private one is created if omitted.
            user_agent: User-Agent header to send.
        """
        self._timeout = timeout
        self._client = client
        self._owns_client = client is None
        self._user_agent = user_agent

    async def fetch_links(self, url: str) -> list[str]:
        """Fetch a page and extract its links.

        Link discovery is best effort: failures are logged and produce an
        empty list.
        """
        if self._client is None:
            self._client = httpx.AsyncClient(follow_redirects=True)

        try:
            response = await self._client.get(
                url,
                timeout=self._timeout,
                headers={"User-Agent": self._user_agent},
            )
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("Error fetching links from %s: %s", url, e)
            return []

        content_type = response.headers.get("content-type", "")
        is_markdown = "markdown" in content_type or urlparse(url).path.endswith(".md")
        return extract_links(response.text, str(response.url), markdown=is_markdown)

    async def close(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
