"""Crawl orchestration."""

from docsminer.engine.controller import CrawlController
from docsminer.engine.crawler import DocsCrawler
from docsminer.engine.progress import CallbackReporter, NullReporter, RecordingReporter

__all__ = [
    "CallbackReporter",
    "CrawlController",
    "DocsCrawler",
    "NullReporter",
    "RecordingReporter",
]
