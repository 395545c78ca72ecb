"""CLI entry point for difflearn."""

from __future__ import annotations

import json
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import TypeVar

import typer
from rich.table import Table

from difflearn import __version__
from difflearn.cli_services import (
    EXIT_ERROR,
    EXIT_INVALID_ARG,
    CLIContext,
    configure_logging,
    console,
    error_console,
    escape_rich,
    get_cli_context,
    get_diff_service,
    load_config,
)
from difflearn.exceptions import DiffLearnError, InvalidArgumentError
from difflearn.git import DiffFormatter
from difflearn.models import BranchMode, ParsedFileDiff

T = TypeVar("T")

app = typer.Typer(
    name="difflearn",
    help="Structured views of git changes across the working tree, commits and branches",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)


class OutputFormat(str, Enum):
    TEXT = "text"
    MARKDOWN = "markdown"
    JSON = "json"
    SUMMARY = "summary"
    UNIFIED = "unified"


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"difflearn {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    repo: Path | None = typer.Option(
        None,
        "--repo",
        "-C",
        help="Path to the git repository (defaults to the current directory)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log git invocations"),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """difflearn command-line interface."""
    config = load_config()
    configure_logging(verbose or config.verbose)
    ctx.obj = CLIContext(config=config, repo_path=repo)


@contextmanager
def _handle_errors() -> Iterator[None]:
    """Map difflearn errors onto exit codes."""
    try:
        yield
    except InvalidArgumentError as e:
        error_console.print(f"[red]Error:[/red] {escape_rich(str(e))}")
        raise typer.Exit(code=EXIT_INVALID_ARG) from e
    except DiffLearnError as e:
        error_console.print(f"[red]Error:[/red] {escape_rich(str(e))}")
        raise typer.Exit(code=EXIT_ERROR) from e


def _run(ctx: typer.Context, query: Callable[..., T]) -> T:
    service = get_diff_service(ctx)
    with _handle_errors():
        return query(service)


def _print_files(files: list[ParsedFileDiff], output_format: OutputFormat) -> None:
    formatter = DiffFormatter()
    if output_format is OutputFormat.TEXT:
        if not files:
            console.print("[dim]No changes.[/dim]")
            return
        console.print(formatter.to_terminal(files))
        return

    # Use built-in print to avoid Rich markup interpretation and wrapping
    if output_format is OutputFormat.MARKDOWN:
        print(formatter.to_markdown(files))
    elif output_format is OutputFormat.JSON:
        print(formatter.to_json(files))
    elif output_format is OutputFormat.SUMMARY:
        print(formatter.to_summary(files))
    else:
        print(formatter.to_unified(files))


_FORMAT_OPTION = typer.Option(OutputFormat.TEXT, "--format", "-f", help="Output format")


@app.command()
def local(
    ctx: typer.Context,
    staged: bool = typer.Option(False, "--staged", help="Show staged changes instead of unstaged"),
    context: int | None = typer.Option(None, "--context", "-U", min=0, help="Context lines around changes"),
    output_format: OutputFormat = _FORMAT_OPTION,
) -> None:
    """Show working-tree or staged changes."""
    files = _run(ctx, lambda s: s.get_local_diff(staged=staged, context_lines=context))
    _print_files(files, output_format)


@app.command()
def commit(
    ctx: typer.Context,
    sha: str = typer.Argument(..., help="Commit to show, or start of a range"),
    sha2: str | None = typer.Argument(None, help="End of the commit range"),
    output_format: OutputFormat = _FORMAT_OPTION,
) -> None:
    """Show a commit against its parent, or a commit range."""
    files = _run(ctx, lambda s: s.get_commit_diff(sha, sha2))
    _print_files(files, output_format)


@app.command()
def branch(
    ctx: typer.Context,
    base: str = typer.Argument(..., help="Base branch"),
    target: str = typer.Argument(..., help="Target branch"),
    mode: BranchMode | None = typer.Option(
        None,
        "--mode",
        "-m",
        help="triple compares against the merge base, double compares tips directly",
    ),
    output_format: OutputFormat = _FORMAT_OPTION,
) -> None:
    """Compare two branches, fetching remote-only branches as needed."""
    effective_mode = mode or get_cli_context(ctx).config.branch_mode
    result = _run(ctx, lambda s: s.get_branch_diff(base, target, effective_mode))
    if output_format is OutputFormat.JSON:
        print(json.dumps(result.model_dump(mode="json"), indent=2))
        return
    for message in result.comparison.messages:
        error_console.print(f"[dim]{escape_rich(message)}[/dim]")
    _print_files(result.files, output_format)


@app.command()
def file(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="File path relative to the repository"),
    sha: str | None = typer.Option(None, "--commit", help="Show the file's change in this commit"),
    output_format: OutputFormat = _FORMAT_OPTION,
) -> None:
    """Show changes to a single file."""
    files = _run(ctx, lambda s: s.get_file_diff(path, sha))
    _print_files(files, output_format)


@app.command()
def history(
    ctx: typer.Context,
    limit: int | None = typer.Option(None, "--limit", "-n", help="Number of commits to list"),
    since: str | None = typer.Option(None, "--since", help="Only commits after this date, e.g. '2 weeks ago'"),
) -> None:
    """List recent commits."""
    commits = _run(ctx, lambda s: s.get_commit_history(limit, since=since))
    table = Table("Commit", "Date", "Author", "Subject", "Files")
    for entry in commits:
        table.add_row(
            entry.hash[:8],
            entry.date.strftime("%Y-%m-%d %H:%M"),
            escape_rich(entry.author),
            escape_rich(entry.message),
            str(len(entry.files_changed)),
        )
    console.print(table)


@app.command()
def branches(ctx: typer.Context) -> None:
    """List local and remote branches."""
    entries = _run(ctx, lambda s: s.list_branches())
    table = Table("", "Branch", "Kind", "Commit", "Needs local")
    for entry in entries:
        table.add_row(
            "*" if entry.is_current else "",
            escape_rich(entry.name),
            entry.kind.value,
            entry.commit_id[:8],
            "yes" if entry.needs_localization else "",
        )
    console.print(table)


@app.command()
def switch(
    ctx: typer.Context,
    target: str = typer.Argument(..., help="Branch to check out (local or remote)"),
    auto_stash: bool | None = typer.Option(
        None,
        "--auto-stash/--no-auto-stash",
        help="Stash uncommitted changes before switching",
    ),
) -> None:
    """Switch branches, stashing uncommitted changes when asked."""
    stash = get_cli_context(ctx).config.auto_stash if auto_stash is None else auto_stash
    outcome = _run(ctx, lambda s: s.switch_branch(target, auto_stash=stash))
    for message in outcome.messages:
        console.print(escape_rich(message))


def run() -> None:
    """Console script entry point."""
    app()


if __name__ == "__main__":
    run()
