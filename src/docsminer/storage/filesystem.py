"""Append-only Markdown output document on the local filesystem."""

import logging
import re
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from docsminer.core.exceptions import SinkError
from docsminer.core.interfaces import OutputSink
from docsminer.core.models import RepositoryFile, RunStats

logger = logging.getLogger(__name__)

MAX_FILENAME_LENGTH = 255


def derive_output_path(
    base_url: str,
    workspace: Path,
    output_folder: Optional[str] = None,
    output_file_name: Optional[str] = None,
) -> Path:
    """Derive the output document path for a crawl.

    Examples:
        https://docs.example.com/guide -> <workspace>/docs.example.com-guide-docs.md
        https://example.com -> <workspace>/example.com-home-docs.md

    Args:
        base_url: Start URL of the crawl.
        workspace: Root directory for output.
        output_folder: Optional sub-folder of the workspace (created).
        output_file_name: Explicit file name; overrides the derived one.

    Returns:
        Path of the output document.
    """
    output_dir = workspace
    if output_folder:
        output_dir = workspace / output_folder
        output_dir.mkdir(parents=True, exist_ok=True)

    if output_file_name:
        name = output_file_name if output_file_name.endswith(".md") else f"{output_file_name}.md"
        return output_dir / name

    parsed = urlparse(base_url)
    url_path = parsed.path.replace("/", "-").strip("-") or "home"

    query = parsed.query
    query_part = ""
    if query:
        query_part = "-" + re.sub(r"[&=]", "-", query).strip("-")

    name = f"{parsed.hostname or ''}-{url_path}{query_part}-docs.md".lower()
    name = re.sub(r"[^a-z0-9\-.]", "-", name)
    name = re.sub(r"-+", "-", name)[:MAX_FILENAME_LENGTH]
    return output_dir / name


def format_page_section(url: str, content: str) -> str:
    return "\n".join([f"\n\n## URL: {url}", "", content, "---\n"])


def format_file_section(file: RepositoryFile) -> str:
    lines = [f"\n\n## File: {file.path}", f"### URL: {file.html_url}", ""]
    if file.skipped:
        lines.append(f"Content skipped: {file.skipped_reason}")
    else:
        lines.extend([f"```{file.language}", file.content, "```"])
    lines.append("---\n")
    return "\n".join(lines)


def format_error_section(subject: str, message: str) -> str:
    return f"\n\n# Error processing {subject}\n\n{message}\n\n---\n"


def format_stats(stats: RunStats) -> str:
    """Build the terminal statistics section."""
    ended_at = stats.ended_at or stats.started_at
    lines = ["\n\n# Crawl Statistics", "", f"- **Source:** {stats.source}"]

    if stats.repository:
        lines.extend(
            [
                f"- **Repository:** {stats.repository}",
                f"- **Branch:** {stats.branch}",
                f"- **Depth:** {stats.max_depth}",
                f"- **Files processed:** {stats.processed}",
                f"- **Total files found:** {stats.total_discovered}",
            ]
        )
    else:
        lines.extend(
            [
                f"- **Depth:** {stats.max_depth}",
                f"- **Pages processed:** {stats.processed}",
                f"- **Total URLs discovered:** {stats.total_discovered}",
                f"- **Crawl method:** {stats.method.value}",
            ]
        )

    lines.extend(
        [
            f"- **Duration:** {stats.duration_seconds:.2f} seconds",
            f"- **Crawl completed:** {ended_at.strftime('%Y-%m-%d %H:%M:%S')}",
            "",
        ]
    )
    return "\n".join(lines) + "\n"


class MarkdownFileSink(OutputSink):
    """Append crawl output to a single Markdown file."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def ensure_exists(self) -> None:
        """Create an empty document unless one is already there."""
        if self._path.exists():
            logger.debug("Appending to existing output %s", self._path)
            return
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text("", encoding="utf-8")
        except OSError as e:
            raise SinkError(f"Cannot create output file {self._path}: {e}") from e

    def append(self, text: str) -> None:
        try:
            with self._path.open("a", encoding="utf-8") as f:
                f.write(text)
        except OSError as e:
            raise SinkError(f"Cannot write output file {self._path}: {e}") from e

    def append_header(self, *lines: str) -> None:
        self.append("\n".join(lines))

    def append_page(self, url: str, content: str) -> None:
        self.append(format_page_section(url, content))

    def append_file(self, file: RepositoryFile) -> None:
        self.append(format_file_section(file))

    def append_error(self, subject: str, message: str) -> None:
        self.append(format_error_section(subject, message))

    def append_stats(self, stats: RunStats) -> None:
        self.append(format_stats(stats))
