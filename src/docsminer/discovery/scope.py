"""Scope policy: which discovered URLs a website crawl may visit."""

from urllib.parse import urlparse

from docsminer.core.models import ScopeContext, path_segments


class ScopePolicy:
    """Keep a crawl on one host, under one path, within a depth budget."""

    def __init__(self, scope: ScopeContext, max_depth: int) -> None:
        """Initialize the policy.

        Args:
            scope: Host and base path derived from the start URL.
            max_depth: Maximum number of extra path segments (exclusive).
        """
        self._scope = scope
        self._max_depth = max_depth

    @classmethod
    def for_start_url(cls, start_url: str, max_depth: int) -> "ScopePolicy":
        return cls(ScopeContext.from_url(start_url), max_depth)

    @property
    def scope(self) -> ScopeContext:
        return self._scope

    def is_in_scope(self, candidate_url: str) -> bool:
        """Check if a URL may be enqueued."""
        return is_in_scope(candidate_url, self._scope, self._max_depth)


def is_in_scope(candidate_url: str, scope: ScopeContext, max_depth: int) -> bool:
    """Check a URL against a scope.

    Args:
        candidate_url: Absolute URL to check.
        scope: Host and base path segments of the crawl.
        max_depth: Extra path segments allowed beyond the base (exclusive).

    Returns:
        True if the URL stays on the host, under the base path, and within
        the depth budget. Unparseable URLs are out of scope.
    """
    try:
        parsed = urlparse(candidate_url)
        hostname = parsed.hostname
        # Malformed ports only surface on access
        parsed.port
    except ValueError:
        return False

    if not hostname or hostname != scope.hostname:
        return False

    segments = path_segments(parsed.path)
    base = scope.base_path_segments

    if len(segments) < len(base):
        return False

    for index, part in enumerate(base):
        if segments[index] != part:
            return False

    extra_depth = len(segments) - len(base)
    return 0 <= extra_depth < max_depth
