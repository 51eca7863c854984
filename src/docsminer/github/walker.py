"""Repository traversal through the GitHub REST API.

Instead of following links, a GitHub crawl lists the repository tree once
and fetches every file's raw content from raw.githubusercontent.com.
"""

import json
import logging
from typing import Any, Optional

import httpx

from docsminer.core.exceptions import RepositoryError, RepositoryFailure
from docsminer.core.models import (
    BranchListing,
    CrawlConfig,
    GithubTarget,
    RepositoryFile,
    TreeEntry,
    path_segments,
)
from docsminer.extraction.fingerprint import DEFAULT_USER_AGENT
from docsminer.github.urls import parse_github_url

logger = logging.getLogger(__name__)

_EXCLUDED_GROUPS = {
    "Image file": ["jpg", "jpeg", "png", "gif", "ico", "svg", "webp", "bmp"],
    "Font file": ["ttf", "otf", "woff", "woff2", "eot"],
    "Audio file": ["mp3", "wav", "ogg", "flac"],
    "Video file": ["mp4", "webm", "avi", "mov"],
    "Document file": ["pdf", "doc", "docx"],
    "Archive file": ["zip", "tar", "gz", "rar", "7z"],
    "Binary executable/library file": ["exe", "dll", "so", "dylib", "bin", "class"],
}

# extension -> reason shown in the output instead of the content
EXCLUDED_EXTENSIONS: dict[str, str] = {
    ext: reason for reason, extensions in _EXCLUDED_GROUPS.items() for ext in extensions
}


def relative_depth(entry: TreeEntry, target: GithubTarget) -> Optional[int]:
    """Depth of an entry below the target path, or None if outside it."""
    if not target.is_specific_path:
        return entry.depth

    base = target.base_path.strip("/")
    if entry.path != base and not entry.path.startswith(base + "/"):
        return None
    return len(path_segments(entry.path[len(base):]))


def filter_entries(
    entries: list[TreeEntry], target: GithubTarget, max_depth: int
) -> list[TreeEntry]:
    """Keep files under the target path whose depth is at most ``max_depth``.

    The bound is inclusive: a file has no links to expand, so the last
    depth level is always written out.
    """
    kept = []
    for entry in entries:
        if not entry.is_file:
            continue
        depth = relative_depth(entry, target)
        if depth is not None and depth <= max_depth:
            kept.append(entry)
    return kept


def format_file_content(entry: TreeEntry, body: str) -> str:
    """Pretty-print JSON documents, pass everything else through."""
    if entry.extension != "json":
        return body
    try:
        data = json.loads(body)
    except ValueError:
        return body
    if isinstance(data, (dict, list)):
        return json.dumps(data, indent=2)
    return body


class GithubTreeWalker:
    """List and fetch the files of a GitHub repository."""

    def __init__(
        self,
        config: Optional[CrawlConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """Initialize the walker.

        Args:
            config: Crawl configuration (API URLs, token, timeout).
            client: Shared HTTP client. A private one is created if omitted.
        """
        self._config = config or CrawlConfig()
        self._client = client
        self._owns_client = client is None

    async def close(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "GithubTreeWalker":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(follow_redirects=True)
        return self._client

    def _api_headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": DEFAULT_USER_AGENT,
        }
        if self._config.github_token:
            headers["Authorization"] = f"Bearer {self._config.github_token}"
        return headers

    async def _api_get(self, target: GithubTarget, path: str, **params: Any) -> httpx.Response:
        """GET an API path, mapping failures to RepositoryError."""
        url = f"{self._config.github_api_url.rstrip('/')}{path}"
        try:
            response = await self._get_client().get(
                url,
                params=params or None,
                headers=self._api_headers(),
                timeout=self._config.timeout,
            )
        except httpx.RequestError as e:
            raise RepositoryError(target.full_name, RepositoryFailure.NETWORK, str(e)) from e

        if response.status_code == 404:
            raise RepositoryError(
                target.full_name, RepositoryFailure.NOT_FOUND, f"GET {path} returned 404"
            )
        if response.status_code == 429 or (
            response.status_code == 403
            and response.headers.get("x-ratelimit-remaining") == "0"
        ):
            raise RepositoryError(
                target.full_name,
                RepositoryFailure.RATE_LIMITED,
                "GitHub API rate limit exceeded; set GITHUB_TOKEN to raise it",
            )
        if response.status_code in (401, 403):
            raise RepositoryError(
                target.full_name,
                RepositoryFailure.ACCESS_DENIED,
                f"GET {path} returned {response.status_code}",
            )
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise RepositoryError(
                target.full_name, RepositoryFailure.NETWORK, str(e)
            ) from e
        return response

    async def get_default_branch(self, target: GithubTarget) -> str:
        """Fetch repository metadata and return its default branch."""
        response = await self._api_get(target, f"/repos/{target.owner}/{target.repo}")
        return response.json().get("default_branch") or "main"

    async def resolve_branch(
        self, target: GithubTarget, explicit: Optional[str] = None
    ) -> str:
        """Pick the branch to walk.

        The branch named in the URL wins, then an explicitly requested
        branch, then the repository's default branch.
        """
        if target.branch:
            return target.branch
        if explicit:
            return explicit
        branch = await self.get_default_branch(target)
        logger.debug("Resolved default branch of %s: %s", target.full_name, branch)
        return branch

    async def list_files(self, target: GithubTarget, branch: str) -> list[TreeEntry]:
        """List every file of a branch via the recursive tree endpoint."""
        response = await self._api_get(
            target,
            f"/repos/{target.owner}/{target.repo}/git/trees/{branch}",
            recursive="1",
        )
        data = response.json()
        if data.get("truncated"):
            logger.warning(
                "Tree listing of %s@%s was truncated by GitHub", target.full_name, branch
            )

        entries = [
            TreeEntry(path=item["path"], type=item.get("type", ""))
            for item in data.get("tree", [])
        ]
        return [entry for entry in entries if entry.is_file]

    async def list_branches(self, url: str) -> BranchListing:
        """List the branches of the repository a URL points at."""
        target = parse_github_url(url)
        default_branch = await self.get_default_branch(target)

        branches: list[str] = []
        response = await self._api_get(
            target, f"/repos/{target.owner}/{target.repo}/branches", per_page="100"
        )
        while True:
            branches.extend(item["name"] for item in response.json())
            next_url = response.links.get("next", {}).get("url")
            if not next_url:
                break
            try:
                response = await self._get_client().get(
                    next_url, headers=self._api_headers(), timeout=self._config.timeout
                )
                response.raise_for_status()
            except httpx.HTTPError as e:
                raise RepositoryError(
                    target.full_name, RepositoryFailure.NETWORK, str(e)
                ) from e

        return BranchListing(
            branches=branches,
            default_branch=default_branch,
            branch_specified_in_url=target.branch_in_url,
        )

    def html_url(self, target: GithubTarget, branch: str, path: str) -> str:
        return f"https://github.com/{target.owner}/{target.repo}/blob/{branch}/{path}"

    def raw_url(self, target: GithubTarget, branch: str, path: str) -> str:
        base = self._config.github_raw_url.rstrip("/")
        return f"{base}/{target.owner}/{target.repo}/{branch}/{path}"

    async def fetch_file(self, target: GithubTarget, branch: str, entry: TreeEntry) -> str:
        """Fetch the raw content of one file.

        Raises:
            httpx.HTTPError: If the file could not be downloaded.
        """
        response = await self._get_client().get(
            self.raw_url(target, branch, entry.path),
            headers={"User-Agent": DEFAULT_USER_AGENT},
            timeout=self._config.timeout,
        )
        response.raise_for_status()
        return response.text

    async def read_entry(
        self, target: GithubTarget, branch: str, entry: TreeEntry
    ) -> RepositoryFile:
        """Fetch a file, or describe why it is skipped."""
        html_url = self.html_url(target, branch, entry.path)
        reason = EXCLUDED_EXTENSIONS.get(entry.extension)
        if reason:
            return RepositoryFile(path=entry.path, html_url=html_url, skipped_reason=reason)

        body = await self.fetch_file(target, branch, entry)
        return RepositoryFile(
            path=entry.path,
            html_url=html_url,
            language=entry.extension,
            content=format_file_content(entry, body),
        )
