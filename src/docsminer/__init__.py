"""
docsminer - Crawl a documentation site or GitHub repository into one Markdown file.

Pages are extracted either through a remote Markdown rendering API or a local
headless browser, normalized, and appended to a single output document as
the crawl progresses.

Usage:
    docsminer https://docs.example.com/guide
    docsminer crawl https://github.com/owner/repo -d 2
"""

__version__ = "0.1.0"

from docsminer.core.exceptions import (
    CrawlError,
    DocsMinerError,
    ExtractionError,
    InvalidUrlError,
    RendererUnavailableError,
    RepositoryError,
    SinkError,
)
from docsminer.core.interfaces import (
    ExtractionStrategy,
    OutputSink,
    ProgressReporter,
)
from docsminer.core.models import (
    CrawlConfig,
    CrawlMethod,
    CrawlRequest,
    CrawlState,
    RunStats,
)

__all__ = [
    "__version__",
    # Models
    "CrawlConfig",
    "CrawlMethod",
    "CrawlRequest",
    "CrawlState",
    "RunStats",
    # Interfaces
    "ExtractionStrategy",
    "OutputSink",
    "ProgressReporter",
    # Errors
    "CrawlError",
    "DocsMinerError",
    "ExtractionError",
    "InvalidUrlError",
    "RendererUnavailableError",
    "RepositoryError",
    "SinkError",
]
