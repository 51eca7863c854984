"""Data models for docsminer."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Any, Optional, Union
from urllib.parse import urlparse


class CrawlMethod(Enum):
    """Content extraction method."""

    API = "api"
    BROWSER = "browser"


class CrawlState(Enum):
    """Lifecycle state of a crawl run."""

    IDLE = "idle"
    RUNNING = "running"
    STOPPING = "stopping"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class CrawlConfig:
    """Tunables shared by the strategies, the tree walker and the crawler."""

    timeout: float = 30.0
    request_delay: float = 0.5
    max_retries: int = 3
    backoff_base: float = 1.0
    backoff_cap: float = 10.0
    backoff_jitter: float = 1.0
    navigation_timeout: float = 30.0
    content_timeout: float = 15.0
    min_content_length: int = 100
    headless: bool = True
    render_endpoint: str = "https://r.jina.ai/"
    github_api_url: str = "https://api.github.com"
    github_raw_url: str = "https://raw.githubusercontent.com"
    github_token: Optional[str] = None


@dataclass(frozen=True)
class CrawlRequest:
    """A single crawl invocation. Immutable for the duration of the run."""

    start_url: str
    max_depth: int
    method: CrawlMethod = CrawlMethod.API
    output_file: Optional[Path] = None
    branch: Optional[str] = None

    def __post_init__(self) -> None:
        if self.max_depth < 1:
            raise ValueError(f"max_depth must be >= 1, got {self.max_depth}")
        if not isinstance(self.method, CrawlMethod):
            # Accept the wire value ("api" / "browser")
            object.__setattr__(self, "method", CrawlMethod(self.method))


@dataclass
class FrontierEntry:
    """A URL waiting in the crawl queue."""

    url: str
    depth: int = 0


@dataclass(frozen=True)
class ScopeContext:
    """Host and base path that every crawled URL must stay under."""

    hostname: str
    base_path_segments: tuple[str, ...] = ()

    @classmethod
    def from_url(cls, url: str) -> "ScopeContext":
        """Build the scope for a start URL."""
        parsed = urlparse(url)
        return cls(
            hostname=parsed.hostname or "",
            base_path_segments=path_segments(parsed.path),
        )


def path_segments(path: str) -> tuple[str, ...]:
    """Split a URL or repository path into its non-empty segments."""
    return tuple(part for part in path.split("/") if part)


@dataclass
class GithubTarget:
    """Repository coordinates parsed from a github.com URL."""

    owner: str
    repo: str
    branch: Optional[str] = None
    base_path: str = ""
    is_specific_path: bool = False
    branch_in_url: bool = False

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass
class TreeEntry:
    """One entry of a recursive repository tree listing."""

    path: str
    type: str = "blob"

    @property
    def is_file(self) -> bool:
        return self.type == "blob"

    @property
    def extension(self) -> str:
        return PurePosixPath(self.path).suffix.lstrip(".").lower()

    @property
    def depth(self) -> int:
        return len(path_segments(self.path))


@dataclass
class RepositoryFile:
    """A tree entry ready to be written: its content or why it was skipped."""

    path: str
    html_url: str
    language: str = ""
    content: str = ""
    skipped_reason: Optional[str] = None

    @property
    def skipped(self) -> bool:
        return self.skipped_reason is not None


@dataclass
class BranchListing:
    """Branches of a repository, for the caller to choose from."""

    branches: list[str]
    default_branch: str
    branch_specified_in_url: bool = False

    def to_message(self) -> dict[str, Any]:
        return {
            "branches": list(self.branches),
            "defaultBranch": self.default_branch,
            "branchSpecifiedInUrl": self.branch_specified_in_url,
        }


@dataclass
class RunStats:
    """Statistics accumulated over one run."""

    source: str
    method: CrawlMethod
    max_depth: int
    processed: int = 0
    total_discovered: int = 0
    started_at: datetime = field(default_factory=datetime.now)
    ended_at: Optional[datetime] = None
    repository: Optional[str] = None
    branch: Optional[str] = None

    @property
    def duration_seconds(self) -> float:
        end = self.ended_at or datetime.now()
        return (end - self.started_at).total_seconds()


@dataclass
class StatusEvent:
    """Human-readable progress line."""

    message: str
    is_error: bool = False

    def to_message(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": "status", "message": self.message}
        if self.is_error:
            data["isError"] = True
        return data


@dataclass
class CheckAutoOpenEvent:
    """Emitted once when a run completes."""

    file_path: str

    def to_message(self) -> dict[str, Any]:
        return {"type": "checkAutoOpen", "filePath": self.file_path}


ProgressEvent = Union[StatusEvent, CheckAutoOpenEvent]
