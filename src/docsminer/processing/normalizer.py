"""HTML to Markdown conversion with documentation-specific cleanup.

This module builds on markdownify for the structural conversion and uses
BeautifulSoup to prepare the tree first: code snippets are flattened into
fenced blocks, vendor scripts are dropped, and SVG images are reduced to
their text alternative.
"""

import re
from typing import Optional
from urllib.parse import urlparse

from bs4 import BeautifulSoup, Tag
from markdownify import MarkdownConverter

# Removed before conversion when capturing a rendered page
CHROME_SELECTORS = [
    "script",
    "style",
    "noscript",
    "nav",
    "header",
    "footer",
    "[role=navigation]",
    ".navigation",
    ".navbar",
    ".menu",
    ".sidebar",
]

CODE_CLASSES = {"highlight", "code-example"}

# Text that marks a code node as vendor boilerplate rather than a snippet
UTILITY_SIGNATURES = (
    "!function",
    "window.__CF",
    "intercom",
    "analytics",
    "gtag",
    "tracking",
)

_DATA_SELECTOR_RE = re.compile(r"\[data-.*?\}+", re.DOTALL)
_LINE_NUMBER_RE = re.compile(r"^\s*\d+(?:[:.|\s]\s*)?", re.MULTILINE)
_NUMBER_ONLY_LINE_RE = re.compile(r"^\d+\s*$", re.MULTILINE)

_LEAKED_CSS_RES = [
    re.compile(r"@keyframes[\s\S]*?}"),
    re.compile(r"\.intercom[\s\S]*?}"),
    re.compile(r"\.tracking[\s\S]*?}"),
]
_BLANK_LINES_RE = re.compile(r"\n{3,}")


def is_svg_source(src: str) -> bool:
    """Check if an image source is an SVG file or inline SVG data URI."""
    src = src.strip()
    if src.lower().startswith("data:image/svg"):
        return True
    try:
        path = urlparse(src).path
    except ValueError:
        path = src
    return path.lower().endswith(".svg") or src.lower().endswith(".svg")


def is_code_block(tag: Tag) -> bool:
    """Match nodes the code preservation rule applies to."""
    if tag.name in ("pre", "code"):
        return True
    classes = tag.get("class") or []
    return any(cls in CODE_CLASSES for cls in classes)


def is_utility_script(text: str) -> bool:
    """Check if captured text is analytics, consent or chat-widget code."""
    return any(signature in text for signature in UTILITY_SIGNATURES)


def clean_code(text: str) -> str:
    """Remove markup debris from a captured code snippet."""
    text = text.strip()
    text = _DATA_SELECTOR_RE.sub("", text)
    text = _LINE_NUMBER_RE.sub("", text)
    text = _NUMBER_ONLY_LINE_RE.sub("", text)
    return text.replace("```", "").strip()


class DocsMarkdownConverter(MarkdownConverter):
    """markdownify converter with SVG and fenced-code rules."""

    def convert_img(self, el, text, *args, **kwargs):
        if is_svg_source(el.get("src") or ""):
            return el.get("alt") or el.get("title") or "Image"
        return super().convert_img(el, text, *args, **kwargs)

    def convert_pre(self, el, text, *args, **kwargs):
        code = el.get_text()
        body = f"\n{code}" if code else ""
        return f"\n```{body}\n```\n"


class MarkdownNormalizer:
    """Convert rendered documentation HTML into clean Markdown."""

    def __init__(self, chrome_selectors: Optional[list[str]] = None) -> None:
        """Initialize the normalizer.

        Args:
            chrome_selectors: CSS selectors removed by ``strip_chrome``.
        """
        self._chrome_selectors = chrome_selectors or CHROME_SELECTORS
        self._converter = DocsMarkdownConverter(heading_style="atx")

    def strip_chrome(self, html: str) -> str:
        """Remove scripts, styles and navigational chrome from a page."""
        soup = BeautifulSoup(html, "html.parser")
        for selector in self._chrome_selectors:
            for elem in soup.select(selector):
                elem.decompose()
        return str(soup)

    def html_to_markdown(self, html: str) -> str:
        """Convert HTML to Markdown. Pure: same input, same output."""
        soup = BeautifulSoup(html, "html.parser")

        for selector in ("head", "script", "style", "noscript", "svg"):
            for elem in soup.select(selector):
                elem.decompose()

        self._flatten_code_blocks(soup)

        markdown = self._converter.convert_soup(soup)
        return self._clean_markdown(markdown)

    def render_page(self, html: str) -> str:
        """Strip chrome, convert, and prefix the page title."""
        soup = BeautifulSoup(html, "html.parser")
        title = "Untitled"
        if soup.title and soup.title.string and soup.title.string.strip():
            title = soup.title.string.strip()

        markdown = self.html_to_markdown(self.strip_chrome(html))
        return f"## Title: {title}\n\n{markdown}"

    def _flatten_code_blocks(self, soup: BeautifulSoup) -> None:
        """Replace every outermost code node with a plain ``pre`` block."""
        matched = soup.find_all(is_code_block)
        matched_ids = {id(node) for node in matched}

        for node in matched:
            if any(id(parent) in matched_ids for parent in node.parents):
                continue

            text = node.get_text()
            if is_utility_script(text):
                node.decompose()
                continue

            block = soup.new_tag("pre")
            block.string = clean_code(text)
            node.replace_with(block)

    def _clean_markdown(self, markdown: str) -> str:
        """Remove leaked CSS and collapse blank lines."""
        markdown = "\n".join(line.rstrip() for line in markdown.split("\n"))
        for pattern in _LEAKED_CSS_RES:
            markdown = pattern.sub("", markdown)
        markdown = _BLANK_LINES_RE.sub("\n\n", markdown)
        return markdown.strip()


_default_normalizer: Optional[MarkdownNormalizer] = None


def html_to_markdown(html: str) -> str:
    """Convert HTML with a shared default normalizer."""
    global _default_normalizer
    if _default_normalizer is None:
        _default_normalizer = MarkdownNormalizer()
    return _default_normalizer.html_to_markdown(html)
