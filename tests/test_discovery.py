"""Tests for the scope policy and link extraction."""

import httpx
import pytest

from conftest import mock_client
from docsminer.core.models import ScopeContext
from docsminer.discovery.links import LinkExtractor, extract_links, is_followable_href
from docsminer.discovery.scope import ScopePolicy, is_in_scope


class TestScopePolicy:
    """Tests for is_in_scope."""

    def setup_method(self):
        self.scope = ScopeContext.from_url("https://ex.com/docs")

    def test_start_url_in_scope(self):
        assert is_in_scope("https://ex.com/docs", self.scope, max_depth=1)

    def test_rejects_other_host(self):
        assert not is_in_scope("https://other.com/docs/a", self.scope, max_depth=3)

    def test_rejects_subdomain(self):
        assert not is_in_scope("https://api.ex.com/docs/a", self.scope, max_depth=3)

    def test_rejects_sibling_path(self):
        assert not is_in_scope("https://ex.com/blog/a", self.scope, max_depth=3)

    def test_rejects_parent_path(self):
        assert not is_in_scope("https://ex.com/", self.scope, max_depth=3)

    def test_rejects_prefix_that_is_not_a_segment(self):
        assert not is_in_scope("https://ex.com/docs-old/a", self.scope, max_depth=3)

    def test_depth_bound_is_exclusive(self):
        assert is_in_scope("https://ex.com/docs/a", self.scope, max_depth=2)
        assert not is_in_scope("https://ex.com/docs/a/b", self.scope, max_depth=2)

    def test_depth_one_admits_only_base(self):
        assert is_in_scope("https://ex.com/docs/", self.scope, max_depth=1)
        assert not is_in_scope("https://ex.com/docs/a", self.scope, max_depth=1)

    def test_unparseable_url_is_rejected(self):
        assert not is_in_scope("http://[::1", self.scope, max_depth=3)
        assert not is_in_scope("not a url", self.scope, max_depth=3)

    def test_malformed_port_is_rejected(self):
        assert not is_in_scope("http://ex.com:abc/docs/x", self.scope, max_depth=3)

    def test_fewer_extra_segments_stay_in_scope(self):
        """Accepting a deep URL implies accepting its shallower ancestors."""
        deep = "https://ex.com/docs/a/b/c"
        policy = ScopePolicy(self.scope, max_depth=4)
        assert policy.is_in_scope(deep)
        for ancestor in (
            "https://ex.com/docs/a/b",
            "https://ex.com/docs/a",
            "https://ex.com/docs",
        ):
            assert policy.is_in_scope(ancestor)

    def test_root_base(self):
        policy = ScopePolicy.for_start_url("https://ex.com", max_depth=2)
        assert policy.is_in_scope("https://ex.com/anything")
        assert not policy.is_in_scope("https://ex.com/a/b")


class TestExtractLinks:
    """Tests for extract_links."""

    def test_html_links_resolved_and_deduplicated(self):
        html = """
        <a href="/docs/a">A</a>
        <a href="b">B</a>
        <a href="/docs/a#section">A again</a>
        <a href="https://other.com/x">Other</a>
        """
        links = extract_links(html, "https://ex.com/docs/")
        assert links == [
            "https://ex.com/docs/a",
            "https://ex.com/docs/b",
            "https://other.com/x",
        ]

    def test_filters_fragments_scripts_and_binaries(self):
        html = """
        <a href="#top">Top</a>
        <a href="javascript:void(0)">JS</a>
        <a href="/files/manual.pdf">PDF</a>
        <a href="/files/release.tar.gz">Tarball</a>
        <a href="/setup.EXE">Installer</a>
        <a href="mailto:team@ex.com">Mail</a>
        <a href="/docs/ok">OK</a>
        """
        links = extract_links(html, "https://ex.com/")
        assert links == ["https://ex.com/docs/ok"]

    def test_malformed_port_dropped(self):
        html = '<a href="http://ex.com:abc/docs/x">Bad</a><a href="/docs/y">Good</a>'
        assert extract_links(html, "https://ex.com/docs/") == ["https://ex.com/docs/y"]

    def test_markdown_links(self):
        markdown = (
            "See [the guide](https://ex.com/docs/guide) and [API](/docs/api \"API\").\n"
            "![diagram](/img/diagram.png)\n"
            "[Download](/files/app.zip)"
        )
        links = extract_links(markdown, "https://ex.com/docs", markdown=True)
        assert links == ["https://ex.com/docs/guide", "https://ex.com/docs/api"]

    def test_is_followable_href(self):
        assert is_followable_href("/docs/page")
        assert is_followable_href("page.html?x=1#y")
        assert not is_followable_href("")
        assert not is_followable_href("#anchor")
        assert not is_followable_href("JavaScript:alert(1)")
        assert not is_followable_href("archive.zip?download=1")


class TestLinkExtractor:
    """Tests for LinkExtractor.fetch_links."""

    @pytest.mark.asyncio
    async def test_fetches_html(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert "User-Agent" in request.headers
            return httpx.Response(
                200,
                html='<a href="/docs/next">Next</a>',
            )

        async with mock_client(handler) as client:
            extractor = LinkExtractor(client=client)
            links = await extractor.fetch_links("https://ex.com/docs")

        assert links == ["https://ex.com/docs/next"]

    @pytest.mark.asyncio
    async def test_fetches_markdown(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                text="[Next](/docs/next)",
                headers={"content-type": "text/markdown; charset=utf-8"},
            )

        async with mock_client(handler) as client:
            extractor = LinkExtractor(client=client)
            links = await extractor.fetch_links("https://ex.com/docs")

        assert links == ["https://ex.com/docs/next"]

    @pytest.mark.asyncio
    async def test_failure_yields_no_links(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        async with mock_client(handler) as client:
            extractor = LinkExtractor(client=client)
            assert await extractor.fetch_links("https://ex.com/docs") == []

    @pytest.mark.asyncio
    async def test_unfetchable_url_yields_no_links(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, html='<a href="/docs/next">Next</a>')

        async with mock_client(handler) as client:
            extractor = LinkExtractor(client=client)
            assert await extractor.fetch_links("http://ex.com:abc/docs") == []
