"""Core models and interfaces for docsminer."""

from docsminer.core.models import (
    BranchListing,
    CheckAutoOpenEvent,
    CrawlConfig,
    CrawlMethod,
    CrawlRequest,
    CrawlState,
    FrontierEntry,
    GithubTarget,
    RunStats,
    ScopeContext,
    StatusEvent,
    TreeEntry,
)
from docsminer.core.interfaces import (
    ExtractionStrategy,
    OutputSink,
    ProgressReporter,
)

__all__ = [
    "BranchListing",
    "CheckAutoOpenEvent",
    "CrawlConfig",
    "CrawlMethod",
    "CrawlRequest",
    "CrawlState",
    "FrontierEntry",
    "GithubTarget",
    "RunStats",
    "ScopeContext",
    "StatusEvent",
    "TreeEntry",
    "ExtractionStrategy",
    "OutputSink",
    "ProgressReporter",
]
