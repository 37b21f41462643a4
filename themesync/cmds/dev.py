"""Development workflow commands for the themesync CLI.

``start`` runs the branch reconciliation once, ``watch`` runs it and then
hot-deploys changed files, and ``deploy`` pushes a single file right away.
"""

import time
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from ..app import handle_exceptions
from ..client import ThemeKitClient
from ..exceptions import ThemeSyncError
from ..hot_deploy import HotDeployer
from ..plugin import ThemeSyncPlugin
from ..reconcile import ReconcileDecision
from ..vcs import current_branch

console = Console()


class ThemeChangeHandler(FileSystemEventHandler):
    """Forwards file changes in the distribution directory to the plugin."""

    def __init__(self, plugin: ThemeSyncPlugin) -> None:
        super().__init__()
        self.plugin = plugin

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self.plugin.handle_hot_update(event.src_path)

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self.plugin.handle_hot_update(event.src_path)


def get_plugin(ctx: typer.Context) -> ThemeSyncPlugin:
    """Build the plugin from the settings in context."""
    settings = ctx.obj["settings"]
    debug = ctx.obj["debug"]
    return ThemeSyncPlugin(
        settings=settings,
        service=ThemeKitClient(command=settings.theme_command, console=console, debug=debug),
        branch_resolver=current_branch,
        console=console,
        debug=debug,
    )


def show_decision(decision: ReconcileDecision) -> None:
    """Print what a dry run would have done for the branch."""
    console.print(f"[yellow]DRY RUN: branch '{escape(decision.branch)}'[/yellow]")
    console.print(f"  Would {escape(decision.message)}")


@handle_exceptions
def start(ctx: typer.Context) -> None:
    """Sync the theme for the current git branch once.

    Fetches the store theme whose name contains the branch name, or creates
    one from the live theme when there is none. Refuses to run on main/master
    or on a branch tied to the live theme.

    Examples:
        # Sync once
        themesync start

        # Show what would happen
        themesync --dry-run start
    """
    plugin = get_plugin(ctx)
    try:
        decision = plugin.build_start(dry_run=ctx.obj["dry_run"])
    except ThemeSyncError:
        raise typer.Exit(1)

    if ctx.obj["dry_run"]:
        show_decision(decision)


@handle_exceptions
def watch(ctx: typer.Context) -> None:
    """Sync the branch theme, then deploy changed files as you edit them.

    Examples:
        themesync watch
    """
    plugin = get_plugin(ctx)
    try:
        decision = plugin.build_start(dry_run=ctx.obj["dry_run"])
    except ThemeSyncError:
        raise typer.Exit(1)

    if ctx.obj["dry_run"]:
        show_decision(decision)
        console.print("  And then watch for changes")
        return

    dist_dir = plugin.settings.dist_dir
    observer = Observer()
    observer.schedule(ThemeChangeHandler(plugin), str(dist_dir), recursive=True)
    observer.start()
    console.print(f"[dim]Watching {dist_dir} for *{plugin.settings.watched_extension} changes (Ctrl-C to stop)[/dim]")

    try:
        while observer.is_alive():
            time.sleep(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopped watching[/yellow]")
        raise typer.Exit(130)
    finally:
        observer.stop()
        observer.join()


@handle_exceptions
def deploy(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help="Theme file inside the distribution directory"),
) -> None:
    """Deploy a single theme file right away.

    Examples:
        themesync deploy src/shopify/sections/header.liquid
    """
    settings = ctx.obj["settings"]
    client = ThemeKitClient(command=settings.theme_command, console=console, debug=ctx.obj["debug"])
    deployer = HotDeployer(client, settings.dist_dir, console=console)

    relative = deployer.relative_path(file)
    if relative is None:
        console.print(f"[red]{escape(str(file))} is not inside {escape(str(settings.dist_dir))}[/red]")
        raise typer.Exit(1)

    if ctx.obj["dry_run"]:
        console.print(f"[yellow]DRY RUN: Would deploy '{escape(relative)}'[/yellow]")
        return

    client.deploy(settings.dist_dir, relative)
    console.print(f"[green]Deployed {escape(relative)}[/green]")
