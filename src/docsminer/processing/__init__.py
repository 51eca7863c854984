"""HTML to Markdown normalization."""

from docsminer.processing.normalizer import MarkdownNormalizer, html_to_markdown

__all__ = [
    "MarkdownNormalizer",
    "html_to_markdown",
]
