#!/usr/bin/env python3
"""wocker-storage CLI - MinIO and Redis storages for local development."""
from typing import Optional

import typer
from rich.console import Console

from wocker_storage.cli_storage_commands import register_storage_commands
from wocker_storage.cli_support import CliState, setup_file_logging
from wocker_storage.core.logger import set_verbose

app = typer.Typer(
    name="wocker-storage",
    help="""wocker-storage - Object storage and cache containers for local development

Quick start:
  wocker-storage create files --type minio   # Configure a MinIO storage
  wocker-storage start files                 # Create volume + container and run it
  wocker-storage ls                          # See configured storages
""",
    add_completion=False,
)

console = Console()


@app.callback()
def main(
    ctx: typer.Context,
    settings: Optional[str] = typer.Option(None, "--settings", help="Path to settings YAML."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show tracebacks and debug logs."),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Also write logs to this file."),
) -> None:
    ctx.obj = CliState(settings_path=settings, verbose=verbose)
    set_verbose(verbose)
    if log_file:
        setup_file_logging(log_file, verbose=verbose)


register_storage_commands(app, console)

if __name__ == "__main__":
    app()
