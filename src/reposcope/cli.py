"""Command line interface for reposcope."""

import logging
import sys
from pathlib import Path
from typing import List, Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .config import Config, ConfigManager
from .errors import (
    ConfigError,
    InvalidPreviewRequestError,
    NoResultsError,
    ReposcopeError,
    SearchStrategiesExhaustedError,
    SearchTimeoutError,
    SelectionCancelledError,
    SelectionInterruptedError,
    ToolUnavailableError,
)
from .external.results import ContentResult, SearchResult
from .external.smart_searcher import SmartSearcher
from .external.tools import get_tool
from .preview import PreviewRequest, build_preview_request
from .repository.filter import RepositoryFilter

logger = logging.getLogger(__name__)

# Messages go to stderr so stdout carries only the selected result
console = Console(stderr=True)

EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


@click.group()
@click.option("--config", "-c", type=click.Path(exists=False), help="Config file path")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.version_option(version=__version__, prog_name="reposcope")
@click.pass_context
def cli(ctx, config: Optional[str], verbose: bool):
    """Find files and content across many local git repositories.

    \b
    CONFIGURATION:
      Config file: ~/.config/reposcope/config.yml (or $REPOSCOPE_CONFIG)

      repositories:
        api: ~/src/api
        web: ~/src/web
      groups:
        backend:
          repositories: [api]

    \b
    EXAMPLES:
      reposcope find file handler.py
      reposcope find content "def main" --group backend
      reposcope tools check
      reposcope preview decode "$(reposcope find file main --encoded)"
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    logging.basicConfig(
        level=logging.WARNING, format="%(levelname)s:%(name)s:%(message)s"
    )
    if verbose:
        logging.getLogger("reposcope").setLevel(logging.INFO)

    ctx.obj["config_manager"] = ConfigManager(Path(config) if config else None)


@cli.group()
def find():
    """Search repositories and pick a result."""
    pass


@find.command("file")
@click.argument("pattern", required=False, default="")
@click.option("--group", "-g", default="", help="Only search repositories in GROUP")
@click.option(
    "--json", "as_json", is_flag=True, help="Print the preview request as JSON"
)
@click.option(
    "--encoded", is_flag=True, help="Print the preview request as base64 JSON"
)
@click.pass_context
def find_file(ctx, pattern: str, group: str, as_json: bool, encoded: bool):
    """Find files whose name matches PATTERN (all files if omitted)."""
    config_manager, config = _load_config(ctx)
    searcher = _create_searcher(ctx, config_manager, config)

    try:
        results = searcher.search_files(pattern, config.repositories, group)
    except SearchStrategiesExhaustedError as e:
        results = _partial_results_or_exit(e, e.results)
    except ReposcopeError as e:
        _fail(str(e))

    _select_and_print(searcher, results, "Select file", as_json, encoded)


@find.command("content")
@click.argument("pattern")
@click.option("--group", "-g", default="", help="Only search repositories in GROUP")
@click.option(
    "--json", "as_json", is_flag=True, help="Print the preview request as JSON"
)
@click.option(
    "--encoded", is_flag=True, help="Print the preview request as base64 JSON"
)
@click.pass_context
def find_content(ctx, pattern: str, group: str, as_json: bool, encoded: bool):
    """Find lines matching the regular expression PATTERN."""
    config_manager, config = _load_config(ctx)
    searcher = _create_searcher(ctx, config_manager, config)

    try:
        results = searcher.search_content(pattern, config.repositories, group)
    except ToolUnavailableError as e:
        console.print(
            f"❌ [red]{escape(e.tool_name)} is required for content search[/red]"
        )
        if e.instructions:
            console.print(escape(e.instructions))
        sys.exit(EXIT_FAILURE)
    except SearchTimeoutError as e:
        results = _partial_results_or_exit(e, e.results)
    except ReposcopeError as e:
        _fail(str(e))

    _select_and_print(searcher, results, "Select match", as_json, encoded)


@cli.group()
def tools():
    """Inspect the external tools reposcope uses."""
    pass


@tools.command("check")
@click.pass_context
def tools_check(ctx):
    """Report which search tools are installed."""
    out = Console()
    searcher = SmartSearcher(verbose=ctx.obj["verbose"], console=out)
    diagnostics = searcher.get_diagnostics()

    table = Table(title="Search Tools")
    table.add_column("Tool", style="cyan", no_wrap=True)
    table.add_column("Status", no_wrap=True)
    table.add_column("Version", no_wrap=True)
    table.add_column("Fallback", style="dim")

    for info in diagnostics.tools:
        if info.available:
            status = "[green]✅ installed[/green]"
        else:
            status = "[red]❌ missing[/red]"
        version = info.version.splitlines()[0] if info.version else ""
        if info.error is not None:
            version = "[yellow]version check failed[/yellow]"
        table.add_row(info.tool.name, status, escape(version), info.alternative)

    out.print(table)
    out.print(
        f"Platform: {diagnostics.platform}  "
        f"Readiness: [bold]{diagnostics.get_readiness()}%[/bold]"
    )
    out.print()
    searcher.show_optimization_tips()


@tools.command("info")
@click.argument("name")
def tools_info(name: str):
    """Show details and install instructions for tool NAME."""
    tool = get_tool(name)
    if tool is None:
        _fail(f"Unknown tool '{name}' (known: fd, ripgrep, fzf)")

    click.echo(tool.get_detailed_info(), nl=False)


@cli.group()
def preview():
    """Work with encoded preview requests."""
    pass


@preview.command("decode")
@click.argument("encoded")
def preview_decode(encoded: str):
    """Print the preview request ENCODED (from `find --encoded`) as JSON."""
    try:
        request = PreviewRequest.decode(encoded)
    except InvalidPreviewRequestError as e:
        _fail(str(e))

    click.echo(request.model_dump_json())


def _load_config(ctx):
    config_manager: ConfigManager = ctx.obj["config_manager"]
    try:
        config = config_manager.load()
    except ConfigError as e:
        _fail(str(e))

    if not config.repositories:
        console.print(
            f"⚠️  [yellow]No repositories configured[/yellow] "
            f"(config: {escape(str(config_manager.config_path))})"
        )
        sys.exit(EXIT_FAILURE)

    return config_manager, config


def _create_searcher(
    ctx, config_manager: ConfigManager, config: Config
) -> SmartSearcher:
    return SmartSearcher(
        repository_filter=RepositoryFilter(config_manager),
        settings=config.settings,
        verbose=ctx.obj["verbose"],
        console=console,
    )


def _partial_results_or_exit(error: Exception, results: List) -> List:
    if not results:
        _fail(str(error))
    console.print(
        f"⚠️  [yellow]{escape(str(error))}[/yellow] "
        f"(showing {len(results)} partial results)"
    )
    return results


def _select_and_print(
    searcher: SmartSearcher,
    results: List[SearchResult],
    prompt: str,
    as_json: bool,
    encoded: bool = False,
) -> None:
    try:
        selected = searcher.select(results, prompt)
    except NoResultsError:
        console.print("No results found.", style="yellow")
        sys.exit(EXIT_FAILURE)
    except SelectionInterruptedError:
        sys.exit(EXIT_INTERRUPTED)
    except SelectionCancelledError:
        sys.exit(EXIT_FAILURE)
    except ReposcopeError as e:
        _fail(str(e))

    if encoded:
        click.echo(build_preview_request(selected).encode())
    elif as_json:
        click.echo(build_preview_request(selected).model_dump_json())
    elif isinstance(selected, ContentResult):
        click.echo(f"{selected.full_path}:{selected.line_number}")
    else:
        click.echo(selected.full_path)


def _fail(message: str) -> None:
    console.print(f"❌ {escape(message)}", style="red")
    sys.exit(EXIT_FAILURE)


def main():
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
