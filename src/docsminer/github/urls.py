"""Parsing of github.com repository URLs."""

from urllib.parse import urlparse

from docsminer.core.exceptions import InvalidUrlError
from docsminer.core.models import GithubTarget, path_segments

GITHUB_HOSTS = ("github.com", "www.github.com")


def is_github_url(url: str) -> bool:
    """Check if a URL points at github.com."""
    try:
        hostname = urlparse(url).hostname
    except ValueError:
        return False
    return (hostname or "").lower() in GITHUB_HOSTS


def parse_github_url(url: str) -> GithubTarget:
    """Parse a repository URL.

    Accepts ``https://github.com/<owner>/<repo>`` optionally followed by
    ``/tree/<branch>/<path...>`` or ``/blob/<branch>/<path...>``.

    Raises:
        InvalidUrlError: If the URL does not name an owner and repository.
    """
    if not is_github_url(url):
        raise InvalidUrlError(url, "not a github.com URL")

    parts = path_segments(urlparse(url).path)
    if len(parts) < 2:
        raise InvalidUrlError(url, "expected https://github.com/<owner>/<repo>")

    owner, repo = parts[0], parts[1]
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]

    branch = None
    base_path = ""
    if len(parts) >= 4 and parts[2] in ("tree", "blob"):
        branch = parts[3]
        base_path = "/".join(parts[4:])

    return GithubTarget(
        owner=owner,
        repo=repo,
        branch=branch,
        base_path=base_path,
        is_specific_path=bool(base_path),
        branch_in_url=branch is not None,
    )
