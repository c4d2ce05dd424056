"""Shared utilities for wocker-storage CLI modules."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from wocker_storage.core.config_store import ConfigStore, JsonFilePersistence
from wocker_storage.core.errors import StorageError
from wocker_storage.core.lifecycle import StorageManager
from wocker_storage.core.prompts import TyperPrompter
from wocker_storage.core.settings import Settings, load_settings
from wocker_storage.services.driver import DockerDriver
from wocker_storage.services.proxy import ReverseProxy


@dataclass
class CliState:
    """Options given before the command name."""
    settings_path: Optional[str] = None
    verbose: bool = False


def get_state(ctx: typer.Context) -> CliState:
    if isinstance(ctx.obj, CliState):
        return ctx.obj
    return CliState()


def build_manager(settings: Settings, console: Console) -> StorageManager:
    """Wire a StorageManager from settings."""
    driver = DockerDriver(
        host=settings.docker_host,
        context=settings.docker_context,
        mock=settings.mock,
    )
    return StorageManager(
        store=ConfigStore(JsonFilePersistence(settings.config_path)),
        driver=driver,
        prompter=TyperPrompter(console),
        proxy=ReverseProxy(driver),
    )


def load_manager(ctx: typer.Context, console: Console) -> StorageManager:
    """Load settings for the current invocation and build the manager."""
    state = get_state(ctx)
    try:
        settings = load_settings(state.settings_path)
    except StorageError as e:
        handle_cli_error(e, console, verbose=state.verbose)

    if settings.log_file:
        setup_file_logging(settings.log_file, verbose=state.verbose)

    return build_manager(settings, console)


def setup_file_logging(log_file: Optional[str] = None, verbose: bool = False) -> None:
    """Set up file logging for CLI commands.

    Args:
        log_file: Path to log file (optional)
        verbose: Enable verbose logging
    """
    from wocker_storage.core.logger import setup_file_logging as _setup_file_logging
    _setup_file_logging(log_file=log_file, verbose=verbose)


def handle_cli_error(
    e: Exception,
    console: Console,
    verbose: bool = False,
    exit_code: int = 1
) -> None:
    """Handle CLI errors with consistent formatting.

    Args:
        e: Exception to handle
        console: Rich console for output
        verbose: Show exception traceback if True
        exit_code: Exit code to use
    """
    console.print(f"[red]Error:[/red] {escape(str(e))}")
    if verbose:
        console.print_exception()
    raise typer.Exit(exit_code)


def print_success(console: Console, message: str, prefix: str = "✓") -> None:
    console.print(f"[green]{prefix}[/green] {message}")


def print_info(console: Console, message: str, prefix: str = "ℹ") -> None:
    console.print(f"[cyan]{prefix}[/cyan] {message}")
