"""Command line host for docsminer."""

import asyncio
import logging
import signal
import sys
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from docsminer import __version__
from docsminer.core.exceptions import DocsMinerError
from docsminer.core.interfaces import ProgressReporter
from docsminer.core.models import (
    CheckAutoOpenEvent,
    CrawlConfig,
    CrawlMethod,
    CrawlState,
    ProgressEvent,
    StatusEvent,
)
from docsminer.engine.controller import CrawlController
from docsminer.github.urls import is_github_url

console = Console()

COMMANDS = ("crawl", "branches", "--help", "-h", "--version", "-V")


class ConsoleReporter(ProgressReporter):
    """Print progress events to the terminal."""

    def __init__(self, console: Console, quiet: bool = False, auto_open: bool = False) -> None:
        self._console = console
        self._quiet = quiet
        self._auto_open = auto_open
        self.output_path: Optional[str] = None

    def emit(self, event: ProgressEvent) -> None:
        if isinstance(event, CheckAutoOpenEvent):
            self.output_path = event.file_path
            if self._auto_open:
                typer.launch(event.file_path)
            return

        if isinstance(event, StatusEvent):
            if event.is_error:
                self._console.print(f"[red]{event.message}[/red]")
            elif not self._quiet:
                self._console.print(f"[dim]{event.message}[/dim]")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold]docsminer[/bold] version {__version__}")
        raise typer.Exit()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _normalize_url(url: str) -> str:
    if "://" not in url:
        url = f"https://{url}"
    return url


def _install_stop_handler(loop: asyncio.AbstractEventLoop, controller: CrawlController) -> None:
    """Route Ctrl+C to a cooperative stop instead of killing the run."""
    try:
        loop.add_signal_handler(signal.SIGINT, controller.stop)
    except (NotImplementedError, RuntimeError):
        # Windows event loops have no signal handlers
        pass


def _choose_branch(controller: CrawlController, url: str) -> Optional[str]:
    """Ask which branch to crawl when the URL does not name one."""
    listing = asyncio.run(controller.discover_branches(url))
    if listing["branchSpecifiedInUrl"] or len(listing["branches"]) <= 1:
        return None
    if not sys.stdin.isatty():
        return None

    console.print(f"[bold]Branches:[/bold] {', '.join(listing['branches'])}")
    return typer.prompt("Branch to crawl", default=listing["defaultBranch"])


async def _run_crawl(controller: CrawlController, message: dict[str, Any]) -> None:
    """Run the crawler asynchronously."""
    _install_stop_handler(asyncio.get_running_loop(), controller)
    await controller.start(message)


def _crawl(
    url: str,
    depth: int,
    method: CrawlMethod,
    workspace: Path,
    output_folder: Optional[str],
    output_file: Optional[str],
    branch: Optional[str],
    auto_open: bool,
    github_token: Optional[str],
    verbose: bool,
    quiet: bool,
) -> None:
    """Execute the crawl operation."""
    _setup_logging(verbose)
    url = _normalize_url(url)

    config = CrawlConfig(github_token=github_token)
    reporter = ConsoleReporter(console, quiet=quiet, auto_open=auto_open)
    controller = CrawlController(workspace, reporter=reporter, config=config)

    message: dict[str, Any] = {
        "startUrl": url,
        "maxDepth": depth,
        "method": method.value,
        "outputFolder": output_folder,
        "outputFileName": output_file,
        "branch": branch,
    }

    try:
        if is_github_url(url) and not branch:
            message["branch"] = _choose_branch(controller, url)

        request = controller.build_request(message)
    except (DocsMinerError, ValueError) as e:
        console.print(f"\n[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print()
    console.print(
        Panel(
            f"[bold cyan]Method:[/bold cyan] {request.method.value}\n"
            f"[bold green]URL:[/bold green] {request.start_url}\n"
            f"[bold magenta]Depth:[/bold magenta] {request.max_depth}\n"
            f"[bold yellow]Output:[/bold yellow] {request.output_file}",
            title="[bold]docsminer[/bold]",
            border_style="blue",
        )
    )
    console.print()

    try:
        asyncio.run(_run_crawl(controller, message))
    except DocsMinerError as e:
        console.print(f"\n[red]Error: {e}[/red]")
        raise typer.Exit(1)

    crawler = controller.crawler
    if crawler is None or crawler.state == CrawlState.FAILED:
        raise typer.Exit(1)

    stats = crawler.stats
    label = "Files" if stats.repository else "Pages"
    console.print()
    console.print(
        Panel(
            f"[bold green]{label} processed:[/bold green] {stats.processed}\n"
            f"[bold blue]Discovered:[/bold blue] {stats.total_discovered}\n"
            f"[bold yellow]Output:[/bold yellow] {reporter.output_path}",
            title="[bold green]Crawl Complete![/bold green]",
            border_style="green",
        )
    )


def _list_branches(url: str, github_token: Optional[str]) -> None:
    """Print the branches of a repository."""
    controller = CrawlController(Path.cwd(), config=CrawlConfig(github_token=github_token))
    try:
        listing = asyncio.run(controller.discover_branches(_normalize_url(url)))
    except DocsMinerError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    table = Table(
        title="[bold]Branches[/bold]",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Branch", style="cyan")
    table.add_column("Default", style="green")

    for name in listing["branches"]:
        table.add_row(name, "yes" if name == listing["defaultBranch"] else "")

    console.print()
    console.print(table)


app = typer.Typer(
    name="docsminer",
    help="Crawl a documentation site or GitHub repository into one Markdown file.",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "-V",
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = None,
) -> None:
    """Crawl a documentation site or GitHub repository into one Markdown file."""


@app.command()
def crawl(
    url: Annotated[
        str,
        typer.Argument(help="Documentation or GitHub repository URL"),
    ],
    depth: Annotated[
        int,
        typer.Option(
            "-d",
            "--depth",
            min=1,
            help="Crawl depth (1 = start page only; for GitHub, folder levels)",
        ),
    ] = 2,
    method: Annotated[
        CrawlMethod,
        typer.Option(
            "-m",
            "--method",
            case_sensitive=False,
            help="Extraction method: remote rendering API or local headless browser",
        ),
    ] = CrawlMethod.API,
    workspace: Annotated[
        Path,
        typer.Option(
            "-w",
            "--workspace",
            help="Directory the output is written under",
        ),
    ] = Path("."),
    output_folder: Annotated[
        Optional[str],
        typer.Option(
            "-o",
            "--output-folder",
            help="Sub-folder of the workspace for the output file",
        ),
    ] = None,
    output_file: Annotated[
        Optional[str],
        typer.Option(
            "-f",
            "--output-file",
            help="Output file name [default: derived from the URL]",
        ),
    ] = None,
    branch: Annotated[
        Optional[str],
        typer.Option(
            "-b",
            "--branch",
            help="GitHub branch [default: branch in URL, else prompt/default branch]",
        ),
    ] = None,
    auto_open: Annotated[
        bool,
        typer.Option(
            "--open",
            help="Open the output file when the crawl completes",
        ),
    ] = False,
    github_token: Annotated[
        Optional[str],
        typer.Option(
            "--github-token",
            envvar="GITHUB_TOKEN",
            help="GitHub token for higher API rate limits",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "-v",
            "--verbose",
            help="Verbose output",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "-q",
            "--quiet",
            help="Only print errors and the summary",
        ),
    ] = False,
) -> None:
    """Crawl a site or repository into a single Markdown file.

    \b
    Examples:
        docsminer crawl https://docs.example.com/guide -d 3
        docsminer crawl https://spa-docs.example.com -m browser
        docsminer crawl https://github.com/owner/repo/tree/main/docs -d 2
    """
    _crawl(
        url,
        depth,
        method,
        workspace,
        output_folder,
        output_file,
        branch,
        auto_open,
        github_token,
        verbose,
        quiet,
    )


@app.command("branches")
def branches(
    url: Annotated[str, typer.Argument(help="GitHub repository URL")],
    github_token: Annotated[
        Optional[str],
        typer.Option(
            "--github-token",
            envvar="GITHUB_TOKEN",
            help="GitHub token for higher API rate limits",
        ),
    ] = None,
) -> None:
    """List the branches of a GitHub repository."""
    _list_branches(url, github_token)


def main() -> None:
    """Main entry point with smart argument handling.

    Allows both:
        docsminer https://docs.example.com
        docsminer crawl https://docs.example.com
    """
    if len(sys.argv) > 1:
        first_arg = sys.argv[1]
        if (
            first_arg.startswith(("http://", "https://"))
            or "." in first_arg
            and first_arg not in COMMANDS
        ):
            sys.argv.insert(1, "crawl")

    app()


if __name__ == "__main__":
    main()
