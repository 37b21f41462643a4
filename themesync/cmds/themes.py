"""Theme inspection commands for the themesync CLI.

These commands only read from the store: they list themes, show the live
theme, and show which theme the current branch maps to.
"""

import typer
from rich.console import Console
from rich.markup import escape

from ..app import handle_exceptions
from ..client import ThemeKitClient
from ..config import load_environment, resolve_credentials
from ..models import Credentials
from ..reconcile import decide, find_live_theme, is_protected
from ..vcs import current_branch

app = typer.Typer()
console = Console()


def get_client_and_credentials(ctx: typer.Context) -> tuple[ThemeKitClient, Credentials]:
    """Get a theme client and the store credentials from context."""
    settings = ctx.obj["settings"]
    env = load_environment(settings.env_file, console=console)
    credentials = resolve_credentials(env, settings)
    client = ThemeKitClient(
        command=settings.theme_command,
        console=console,
        debug=ctx.obj["debug"],
    )
    return client, credentials


@app.command("list")
@handle_exceptions
def list_themes(ctx: typer.Context) -> None:
    """List every theme in the store.

    Examples:
        # Show themes as a table
        themesync themes list

        # Get as YAML
        themesync themes list -o yaml
    """
    client, credentials = get_client_and_credentials(ctx)
    themes = client.list_themes(credentials)

    formatter = ctx.obj["output_formatter"]
    formatter.render(
        [theme.model_dump() for theme in themes],
        format=ctx.obj["output_format"],
        columns=["id", "name", "live"],
        title="Store Themes",
    )


@app.command()
@handle_exceptions
def current(ctx: typer.Context) -> None:
    """Show the live theme.

    Examples:
        themesync themes current
    """
    client, credentials = get_client_and_credentials(ctx)
    live = find_live_theme(client.list_themes(credentials))

    if ctx.obj["output_format"] in ["json", "yaml"]:
        ctx.obj["output_formatter"].render(live.model_dump(), format=ctx.obj["output_format"])
    else:
        console.print(f"Live theme: [bold cyan]{escape(live.name)}[/bold cyan] ({live.id})")


@app.command()
@handle_exceptions
def branch(ctx: typer.Context) -> None:
    """Show the current git branch and what a sync would do for it.

    Examples:
        themesync themes branch
    """
    settings = ctx.obj["settings"]
    name = current_branch()

    themes = []
    if not is_protected(name, settings.protected_branches):
        client, credentials = get_client_and_credentials(ctx)
        themes = client.list_themes(credentials)
    decision = decide(name, themes, settings.protected_branches)
    matching = [theme.model_dump() for theme in themes if theme.matches_branch(name)]

    if ctx.obj["output_format"] in ["json", "yaml"]:
        ctx.obj["output_formatter"].render(
            {
                "branch": name,
                "action": decision.state.value,
                "reason": decision.reason,
                "matching_themes": matching,
            },
            format=ctx.obj["output_format"],
        )
        return

    console.print(f"Branch: [bold cyan]{escape(name)}[/bold cyan]")
    console.print(f"Action: [bold]{decision.state.value}[/bold] ({escape(decision.message)})")
    if matching:
        ctx.obj["output_formatter"].render_table(matching, title="Matching Themes")
