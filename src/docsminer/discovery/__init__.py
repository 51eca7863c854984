"""Scope policy and link discovery for website crawls."""

from docsminer.discovery.links import LinkExtractor, extract_links
from docsminer.discovery.scope import ScopePolicy, is_in_scope

__all__ = [
    "LinkExtractor",
    "ScopePolicy",
    "extract_links",
    "is_in_scope",
]
