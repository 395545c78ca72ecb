"""CLI service layer for difflearn.

Provides the consoles, exit codes and service construction shared by
CLI commands.
"""
from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from difflearn.config import DiffLearnConfig, get_config
from difflearn.exceptions import ConfigError
from difflearn.services import DiffService, ServiceFactory

# Exit codes
EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_INVALID_ARG = 2

console = Console(stderr=False)  # stdout for normal output
error_console = Console(stderr=True)  # stderr for errors


def escape_rich(text: str) -> str:
    """Escape brackets to prevent Rich markup interpretation."""
    return text.replace("[", "\\[").replace("]", "\\]")


def configure_logging(verbose: bool) -> None:
    """Route library logging to stderr through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_path=False)],
        force=True,
    )


def load_config() -> DiffLearnConfig:
    """Load configuration, exiting with an error message if it is invalid."""
    try:
        return get_config()
    except ConfigError as e:
        error_console.print(f"[red]Error:[/red] {escape_rich(str(e))}")
        raise typer.Exit(code=EXIT_ERROR) from e


class CLIContext:
    """Invocation-scoped context for CLI state."""

    def __init__(self, config: DiffLearnConfig, repo_path: Path | None = None):
        self.config = config
        self.repo_path = repo_path


def get_cli_context(ctx: typer.Context) -> CLIContext:
    if isinstance(ctx.obj, CLIContext):
        return ctx.obj
    return CLIContext(config=load_config())


def get_diff_service(ctx: typer.Context) -> DiffService:
    """Build a DiffService for the invocation, exiting if the path is not a repository."""
    cli_ctx = get_cli_context(ctx)
    factory = ServiceFactory(repo_path=cli_ctx.repo_path, config=cli_ctx.config)
    service = factory.create_diff_service()
    if not service.is_repo():
        location = escape_rich(str(service.runner.repo_path))
        error_console.print(f"[red]Error:[/red] Not a git repository: {location}")
        raise typer.Exit(code=EXIT_ERROR)
    return service
