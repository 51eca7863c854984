"""GitHub repository traversal."""

from docsminer.github.urls import is_github_url, parse_github_url
from docsminer.github.walker import GithubTreeWalker, filter_entries

__all__ = [
    "GithubTreeWalker",
    "filter_entries",
    "is_github_url",
    "parse_github_url",
]
