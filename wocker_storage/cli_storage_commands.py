"""Storage lifecycle CLI commands."""
from __future__ import annotations

import json
from dataclasses import asdict
from typing import Optional

import typer
import yaml
from rich.console import Console
from rich.table import Table

from wocker_storage.cli_support import (
    get_state,
    handle_cli_error,
    load_manager,
    print_info,
    print_success,
)
from wocker_storage.core.errors import StorageError
from wocker_storage.services.driver import DockerError


def register_storage_commands(root: typer.Typer, console: Console) -> None:
    """Attach storage commands to the main CLI."""

    @root.command("create")
    def create_command(
        ctx: typer.Context,
        name: Optional[str] = typer.Argument(None, help="Storage name (prompted if omitted)."),
        type_: Optional[str] = typer.Option(None, "--type", "-t", help="Storage type: minio or redis."),
        username: Optional[str] = typer.Option(None, "--username", "-u", help="Root username."),
        password: Optional[str] = typer.Option(None, "--password", "-p", help="Root password."),
        image_name: Optional[str] = typer.Option(None, "--image-name", help="Image repository override."),
        image_version: Optional[str] = typer.Option(None, "--image-version", help="Image version override."),
    ) -> None:
        """Add a storage to the configuration."""
        manager = load_manager(ctx, console)
        try:
            storage = manager.create(
                name=name,
                type=type_,
                username=username,
                password=password,
                image_name=image_name,
                image_version=image_version,
            )
        except (StorageError, DockerError) as e:
            handle_cli_error(e, console, verbose=get_state(ctx).verbose)

        print_success(console, f"Created storage {storage.name} ({storage.type.value})")

    @root.command("destroy")
    def destroy_command(
        ctx: typer.Context,
        name: str = typer.Argument(..., help="Storage to destroy."),
        yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation."),
        force: bool = typer.Option(False, "--force", "-f", help="Allow destroying the default storage."),
    ) -> None:
        """Remove a storage, its container and its default volume."""
        manager = load_manager(ctx, console)
        try:
            manager.destroy(name, yes=yes, force=force)
        except (StorageError, DockerError) as e:
            handle_cli_error(e, console, verbose=get_state(ctx).verbose)

        print_success(console, f"Destroyed storage {name}")

    @root.command("upgrade")
    def upgrade_command(
        ctx: typer.Context,
        name: Optional[str] = typer.Argument(None, help="Storage name (default storage if omitted)."),
        volume: Optional[str] = typer.Option(None, "--volume", help="Use this volume for data."),
        image: Optional[str] = typer.Option(None, "--image", help="Full image reference."),
        image_name: Optional[str] = typer.Option(None, "--image-name", help="Image repository."),
        image_version: Optional[str] = typer.Option(None, "--image-version", help="Image version."),
    ) -> None:
        """Change the image or volume of a storage."""
        manager = load_manager(ctx, console)
        try:
            changed = manager.upgrade(
                name=name,
                volume=volume,
                image=image,
                image_name=image_name,
                image_version=image_version,
            )
        except (StorageError, DockerError) as e:
            handle_cli_error(e, console, verbose=get_state(ctx).verbose)

        if changed:
            print_success(console, "Storage updated. Run 'start --restart' to apply.")
        else:
            print_info(console, "Nothing to update")

    @root.command("ls")
    def list_command(
        ctx: typer.Context,
        format: str = typer.Option("table", "--format", "-f", help="Output format: table|json|yaml"),
    ) -> None:
        """List configured storages."""
        manager = load_manager(ctx, console)
        try:
            rows = manager.list()
        except (StorageError, DockerError) as e:
            handle_cli_error(e, console, verbose=get_state(ctx).verbose)

        if format == "json":
            console.print_json(json.dumps([asdict(row) for row in rows]))
            return
        if format == "yaml":
            console.print(yaml.safe_dump([asdict(row) for row in rows], sort_keys=False), end="")
            return
        if format != "table":
            console.print(f"[red]Error:[/red] Unknown format '{format}'")
            raise typer.Exit(2)

        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("Name", style="cyan")
        table.add_column("Type", style="yellow")
        table.add_column("Container", style="dim")

        for row in rows:
            label = f"{row.name} (default)" if row.is_default else row.name
            table.add_row(label, row.type, row.container_name)

        console.print(table)

    @root.command("start")
    def start_command(
        ctx: typer.Context,
        name: Optional[str] = typer.Argument(None, help="Storage name (default storage if omitted)."),
        restart: bool = typer.Option(False, "--restart", "-r", help="Recreate the container."),
    ) -> None:
        """Start a storage container."""
        manager = load_manager(ctx, console)
        try:
            started = manager.start(name, restart=restart)
        except (StorageError, DockerError) as e:
            handle_cli_error(e, console, verbose=get_state(ctx).verbose)

        if started:
            print_success(console, "Storage started")
        else:
            print_info(console, "Nothing started")

    @root.command("stop")
    def stop_command(
        ctx: typer.Context,
        name: Optional[str] = typer.Argument(None, help="Storage name (default storage if omitted)."),
    ) -> None:
        """Stop a storage container."""
        manager = load_manager(ctx, console)
        try:
            storage = manager.stop(name)
        except (StorageError, DockerError) as e:
            handle_cli_error(e, console, verbose=get_state(ctx).verbose)

        print_success(console, f"Stopped storage {storage.name}")

    @root.command("use")
    def use_command(
        ctx: typer.Context,
        name: str = typer.Argument(..., help="Storage to make default."),
    ) -> None:
        """Set the default storage."""
        manager = load_manager(ctx, console)
        try:
            storage = manager.use(name)
        except (StorageError, DockerError) as e:
            handle_cli_error(e, console, verbose=get_state(ctx).verbose)

        print_success(console, f"Default storage is now {storage.name}")
