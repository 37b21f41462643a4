"""Main Typer application for the themesync CLI.

This module contains the main Typer app instance and registers all command
groups. It provides the entry point for the CLI and handles global options
like the settings file, debug mode, dry-run and output formatting.
"""

import sys
from functools import wraps
from pathlib import Path
from typing import Optional

import click
import typer
from rich.console import Console
from rich.markup import escape
from rich.traceback import install

from . import __version__
from .config import load_settings
from .exceptions import ThemeSyncError, ConfigError
from .render import OutputFormatter
from .utils.exceptions import format_error_for_user

# Install rich traceback handler for better error display
install(show_locals=False)

app = typer.Typer(
    name="themesync",
    help="Keep a local theme directory in sync with the store theme for your git branch",
    context_settings={"help_option_names": ["-h", "--help"]},
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()
output_formatter = OutputFormatter(console)

_registered = False


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        typer.echo(f"themesync {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Settings file (defaults to ./themesync.toml when present)",
    ),
    env_file: Optional[Path] = typer.Option(
        None,
        "--env-file",
        help="Environment file holding the store credentials",
    ),
    dist: Optional[Path] = typer.Option(
        None,
        "--dist",
        help="Distribution directory holding the theme files",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Show what would be done without making changes",
    ),
    output_format: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format (table, json, yaml)",
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """themesync - develop a store theme against the theme for your git branch.

    On start the current branch is compared with the themes in the store:
    a theme whose name contains the branch is fetched, otherwise a new one
    is created from the live theme. While watching, every changed theme
    file is deployed on its own.

    Examples:
        # Sync the branch theme once
        themesync start

        # Sync, then deploy files as they change
        themesync watch

        # List the store's themes as JSON
        themesync themes list -o json
    """
    try:
        settings = load_settings(config, env_file=env_file, dist_dir=dist)
    except ConfigError as e:
        console.print(f"[red]{escape(format_error_for_user(e, debug))}[/red]")
        raise typer.Exit(1)

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["debug"] = debug
    ctx.obj["dry_run"] = dry_run
    ctx.obj["output_format"] = output_format
    ctx.obj["console"] = console
    ctx.obj["output_formatter"] = output_formatter

    if debug:
        console.print("[dim]Debug mode enabled[/dim]")
        console.print(f"[dim]Distribution directory: {settings.dist_dir}[/dim]")
        console.print(f"[dim]Environment file: {settings.env_file}[/dim]")


def handle_exceptions(func):
    """Decorator to handle common exceptions in commands."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ThemeSyncError as e:
            ctx = click.get_current_context()
            debug = ctx.obj.get("debug", False) if ctx.obj else False
            console.print(f"[red]{escape(format_error_for_user(e, debug))}[/red]")
            if not debug and not isinstance(e, ConfigError):
                console.print("[dim]Use --debug for more details[/dim]")
            raise typer.Exit(1)
        except KeyboardInterrupt:
            console.print("\n[yellow]Operation cancelled by user[/yellow]")
            raise typer.Exit(130)
    return wrapper


def register_commands() -> None:
    """Register all command groups with the main app."""
    global _registered
    if _registered:
        return

    from .cmds import themes_app, start, watch, deploy

    app.add_typer(themes_app, name="themes", help="Inspect remote themes")
    app.command()(start)
    app.command()(watch)
    app.command()(deploy)
    _registered = True


def cli():
    """Entry point for the CLI."""
    register_commands()

    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(130)


if __name__ == "__main__":
    cli()
