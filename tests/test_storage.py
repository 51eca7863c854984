"""Tests for the Markdown output document."""

from datetime import datetime

import pytest

from docsminer.core.exceptions import SinkError
from docsminer.core.models import CrawlMethod, RepositoryFile, RunStats
from docsminer.storage.filesystem import (
    MarkdownFileSink,
    derive_output_path,
    format_stats,
)


class TestDeriveOutputPath:
    """Tests for derive_output_path."""

    def test_host_and_path(self, temp_dir):
        path = derive_output_path("https://docs.example.com/guide/intro", temp_dir)
        assert path == temp_dir / "docs.example.com-guide-intro-docs.md"

    def test_empty_path_is_home(self, temp_dir):
        path = derive_output_path("https://Example.com/", temp_dir)
        assert path.name == "example.com-home-docs.md"

    def test_query_included(self, temp_dir):
        path = derive_output_path("https://ex.com/search?q=api&lang=en", temp_dir)
        assert path.name == "ex.com-search-q-api-lang-en-docs.md"

    def test_unsafe_characters_replaced(self, temp_dir):
        path = derive_output_path("https://ex.com/a_b/%20c", temp_dir)
        assert path.name == "ex.com-a-b-20c-docs.md"

    def test_long_names_truncated(self, temp_dir):
        path = derive_output_path("https://ex.com/" + "a" * 400, temp_dir)
        assert len(path.name) == 255

    def test_output_folder_created(self, temp_dir):
        path = derive_output_path("https://ex.com/docs", temp_dir, output_folder="out/docs")
        assert path.parent == temp_dir / "out" / "docs"
        assert path.parent.is_dir()

    def test_explicit_file_name(self, temp_dir):
        assert derive_output_path("https://ex.com", temp_dir, output_file_name="notes") == (
            temp_dir / "notes.md"
        )
        assert derive_output_path("https://ex.com", temp_dir, output_file_name="a.md") == (
            temp_dir / "a.md"
        )


class TestMarkdownFileSink:
    """Tests for MarkdownFileSink."""

    def test_ensure_exists_creates_empty_file(self, output_sink):
        output_sink.ensure_exists()
        assert output_sink.path.read_text() == ""

    def test_ensure_exists_keeps_existing_content(self, output_sink):
        output_sink.path.write_text("earlier run\n")
        output_sink.ensure_exists()
        output_sink.append_page("https://ex.com", "Hello")

        text = output_sink.path.read_text()
        assert text.startswith("earlier run\n")
        assert "## URL: https://ex.com" in text

    def test_sections_appear_in_append_order(self, output_sink):
        output_sink.ensure_exists()
        output_sink.append_header("# Source: https://ex.com", "")
        output_sink.append_page("https://ex.com/a", "Page A")
        output_sink.append_error("https://ex.com/b", "Failed to get content")
        output_sink.append_page("https://ex.com/c", "Page C")

        text = output_sink.path.read_text()
        positions = [
            text.index("# Source: https://ex.com"),
            text.index("## URL: https://ex.com/a"),
            text.index("# Error processing https://ex.com/b"),
            text.index("## URL: https://ex.com/c"),
        ]
        assert positions == sorted(positions)

    def test_page_section_format(self, output_sink):
        output_sink.ensure_exists()
        output_sink.append_page("https://ex.com/a", "Body")
        assert output_sink.path.read_text() == "\n\n## URL: https://ex.com/a\n\nBody\n---\n"

    def test_file_section_format(self, output_sink):
        output_sink.ensure_exists()
        output_sink.append_file(
            RepositoryFile(
                path="src/app.py",
                html_url="https://github.com/acme/widgets/blob/main/src/app.py",
                language="py",
                content="print(1)",
            )
        )
        assert output_sink.path.read_text() == (
            "\n\n## File: src/app.py\n"
            "### URL: https://github.com/acme/widgets/blob/main/src/app.py\n"
            "\n```py\nprint(1)\n```\n---\n"
        )

    def test_skipped_file_section(self, output_sink):
        output_sink.ensure_exists()
        output_sink.append_file(
            RepositoryFile(path="logo.png", html_url="u", skipped_reason="Image file")
        )
        text = output_sink.path.read_text()
        assert "Content skipped: Image file" in text
        assert "```" not in text

    def test_unwritable_path_raises_sink_error(self, temp_dir):
        blocker = temp_dir / "not-a-dir"
        blocker.write_text("")
        sink = MarkdownFileSink(blocker / "out.md")

        with pytest.raises(SinkError):
            sink.ensure_exists()
        with pytest.raises(SinkError):
            sink.append("text")


class TestFormatStats:
    """Tests for the statistics section."""

    def test_website_stats(self):
        stats = RunStats(
            source="https://ex.com/docs",
            method=CrawlMethod.BROWSER,
            max_depth=2,
            processed=4,
            total_discovered=9,
            started_at=datetime(2024, 5, 1, 10, 0, 0),
            ended_at=datetime(2024, 5, 1, 10, 0, 12, 500000),
        )
        text = format_stats(stats)

        assert text.startswith("\n\n# Crawl Statistics\n")
        assert "- **Source:** https://ex.com/docs" in text
        assert "- **Pages processed:** 4" in text
        assert "- **Total URLs discovered:** 9" in text
        assert "- **Crawl method:** browser" in text
        assert "- **Duration:** 12.50 seconds" in text
        assert "- **Crawl completed:** 2024-05-01 10:00:12" in text

    def test_repository_stats(self):
        stats = RunStats(
            source="https://github.com/acme/widgets",
            method=CrawlMethod.API,
            max_depth=3,
            processed=5,
            total_discovered=5,
            started_at=datetime(2024, 5, 1, 10, 0, 0),
            ended_at=datetime(2024, 5, 1, 10, 0, 1),
            repository="acme/widgets",
            branch="main",
        )
        text = format_stats(stats)

        assert "- **Repository:** acme/widgets" in text
        assert "- **Branch:** main" in text
        assert "- **Files processed:** 5" in text
        assert "Crawl method" not in text
