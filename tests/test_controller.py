"""Tests for the run controller."""

import pytest

from conftest import FakeLinkExtractor, FakeStrategy, no_sleep
from docsminer.core.models import CheckAutoOpenEvent, CrawlMethod, CrawlRequest, CrawlState
from docsminer.engine import controller as controller_module
from docsminer.engine.controller import CrawlController
from docsminer.engine.crawler import DocsCrawler
from docsminer.engine.progress import CallbackReporter


@pytest.fixture
def offline_crawler(monkeypatch):
    """Make the controller build crawlers with fake network collaborators."""

    def build(request, sink, reporter=None, config=None):
        return DocsCrawler(
            request,
            sink,
            reporter,
            config,
            strategy=FakeStrategy(),
            link_extractor=FakeLinkExtractor({}),
            sleep=no_sleep,
        )

    monkeypatch.setattr(controller_module, "DocsCrawler", build)


class TestBuildRequest:
    """Tests for turning start messages into requests."""

    def test_derives_output_path(self, temp_dir):
        controller = CrawlController(temp_dir)
        request = controller.build_request(
            {"startUrl": " https://ex.com/docs ", "maxDepth": "3", "method": "browser"}
        )

        assert request.start_url == "https://ex.com/docs"
        assert request.max_depth == 3
        assert request.method is CrawlMethod.BROWSER
        assert request.output_file == temp_dir / "ex.com-docs-docs.md"
        assert request.branch is None

    def test_optional_fields(self, temp_dir):
        controller = CrawlController(temp_dir)
        request = controller.build_request(
            {
                "startUrl": "https://github.com/acme/widgets",
                "maxDepth": 2,
                "method": "api",
                "outputFolder": "out",
                "outputFileName": "widgets",
                "branch": "dev",
            }
        )

        assert request.output_file == temp_dir / "out" / "widgets.md"
        assert request.branch == "dev"

    def test_invalid_depth(self, temp_dir):
        with pytest.raises(ValueError):
            CrawlController(temp_dir).build_request(
                {"startUrl": "https://ex.com", "maxDepth": 0, "method": "api"}
            )


class TestCrawlController:
    """Tests for start and stop handling."""

    @pytest.mark.asyncio
    async def test_start_runs_crawl(self, temp_dir, offline_crawler):
        messages = []
        controller = CrawlController(temp_dir, reporter=CallbackReporter(messages.append))

        stats = await controller.start(
            {"startUrl": "https://ex.com/docs", "maxDepth": 1, "method": "api"}
        )

        output = temp_dir / "ex.com-docs-docs.md"
        assert stats.processed == 1
        assert output.exists()
        assert controller.crawler.state is CrawlState.COMPLETED
        assert messages[-1] == {"type": "checkAutoOpen", "filePath": str(output)}

    def test_new_start_supersedes_previous(self, temp_dir, offline_crawler):
        controller = CrawlController(temp_dir)
        message = {"startUrl": "https://ex.com/docs", "maxDepth": 1, "method": "api"}

        first = controller.create_crawler(controller.build_request(message))
        second = controller.create_crawler(controller.build_request(message))

        assert first.stop_requested
        assert not second.stop_requested
        assert controller.crawler is second

    def test_request_without_output_file_rejected(self, temp_dir, offline_crawler):
        controller = CrawlController(temp_dir)
        message = {"startUrl": "https://ex.com/docs", "maxDepth": 1, "method": "api"}
        active = controller.create_crawler(controller.build_request(message))

        with pytest.raises(ValueError, match="No output file"):
            controller.create_crawler(CrawlRequest(start_url="https://ex.com", max_depth=1))

        assert controller.crawler is active
        assert not active.stop_requested

    def test_stop_emits_status(self, temp_dir, offline_crawler, reporter):
        controller = CrawlController(temp_dir, reporter=reporter)
        controller.create_crawler(
            controller.build_request(
                {"startUrl": "https://ex.com/docs", "maxDepth": 1, "method": "api"}
            )
        )

        controller.stop()

        assert controller.crawler.stop_requested
        assert reporter.messages == [
            "Stopping crawl... Please wait for current page to finish."
        ]

    def test_stop_without_crawler_is_noop(self, temp_dir, reporter):
        CrawlController(temp_dir, reporter=reporter).stop()
        assert reporter.events == []

    @pytest.mark.asyncio
    async def test_check_auto_open_after_stop(self, temp_dir, offline_crawler, reporter):
        controller = CrawlController(temp_dir, reporter=reporter)
        message = {"startUrl": "https://ex.com/docs", "maxDepth": 1, "method": "api"}
        crawler = controller.create_crawler(controller.build_request(message))
        crawler.stop()

        # A fresh run clears an earlier stop request
        await crawler.run()

        assert isinstance(reporter.events[-1], CheckAutoOpenEvent)
