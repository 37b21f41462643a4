"""Output rendering and formatting utilities.

This module provides the console messages printed while syncing, and an
output formatter for displaying theme data as a table, JSON or YAML.
"""

import sys
import json
import os
from typing import Any, Dict, List, Optional, Union

import yaml
from rich.console import Console
from rich.table import Table
from rich import box
from rich.markup import escape

from .exceptions import ConfigError

PREFIX = "[bold blue]theme[bright_white]//[/bright_white]sync[/bold blue]"
SEPARATOR = "____________________"

BANNER = r"""
 _   _                        //
| |_| |__   ___ _ __ ___   ___//  ___ _   _ _ __   ___
| __| '_ \ / _ \ '_ ` _ \ / _ \/ / __| | | | '_ \ / __|
| |_| | | |  __/ | | | | |  __/ /\__ \ |_| | | | | (__
 \__|_| |_|\___|_| |_| |_|\___/ /|___/\__, |_| |_|\___|
                             //       |___/
"""


def print_step(console: Console, topic: str, message: str, compact: bool = False) -> None:
    """Print a progress message for one sync step.

    Args:
        console: Console to print to
        topic: Short step label, e.g. ``Fetch`` or ``Create``
        message: Message body, may contain rich markup
        compact: Skip the separator printed after the message
    """
    console.print(f"{PREFIX}[bold blue]:{topic}[/bold blue] {message}")
    if not compact:
        console.print(SEPARATOR)
        console.print()


def print_error(console: Console, topic: str, message: str) -> None:
    """Print a user-facing error message."""
    console.print(
        f"[bold bright_white on red]theme//sync:{topic}[/bold bright_white on red] "
        f"[underline red]{escape(message)}[/underline red]"
    )
    console.print(SEPARATOR)
    console.print()


def print_banner(console: Console) -> None:
    """Print the startup banner."""
    console.print(BANNER, style="bold blue", highlight=False)
    console.print("_" * 33)
    console.print()


def print_dev_ready(console: Console, dist_dir: str) -> None:
    """Print the notice shown once the first file change arrives."""
    shown = dist_dir if dist_dir.startswith(("/", ".")) else f"./{dist_dir}"
    console.print(SEPARATOR)
    console.print()
    print_step(
        console,
        "Shopify",
        f"Ready to start developing in [underline bold blue]{escape(shown)}[/underline bold blue]",
    )


class OutputFormatter:
    """Output formatter that handles table, JSON and YAML formats."""

    def __init__(self, console: Optional[Console] = None) -> None:
        """Initialize output formatter.

        Args:
            console: Rich console instance. If None, creates a new one.
        """
        self.console = console or Console()

    def determine_format(self, format_override: Optional[str] = None) -> str:
        """Determine the output format to use.

        Args:
            format_override: Explicit format override

        Returns:
            Format name (table, json, yaml)
        """
        if format_override:
            return format_override.lower()

        env_format = os.environ.get("THEMESYNC_OUTPUT_FORMAT")
        if env_format:
            return env_format.lower()

        if sys.stdout.isatty():
            return "table"
        return "json"

    def render(
        self,
        data: Any,
        format: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        """Render data in the specified format.

        Args:
            data: Data to render
            format: Output format (table, json, yaml)
            **kwargs: Additional formatting options

        Raises:
            ConfigError: If the format is unknown
        """
        format_name = self.determine_format(format)

        if format_name == "table":
            self.render_table(data, **kwargs)
        elif format_name == "json":
            self.render_json(data)
        elif format_name == "yaml":
            self.render_yaml(data)
        else:
            raise ConfigError(f"Unknown output format: {format_name}")

    def render_table(
        self,
        data: Union[List[Dict[str, Any]], Dict[str, Any]],
        columns: Optional[List[str]] = None,
        title: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        """Render data as a table using Rich.

        Args:
            data: Data to render
            columns: Column names to display, defaults to the keys of the first row
            title: Table title
            **kwargs: Additional arguments
        """
        if not data:
            self.console.print("[dim]No data to display[/dim]")
            return

        if isinstance(data, dict):
            data = [data]

        columns = columns or list(data[0].keys())
        table = Table(title=title, box=box.SIMPLE_HEAVY)
        for column in columns:
            table.add_column(column.replace("_", " ").title(), style="cyan" if column == "id" else None)

        for row in data:
            table.add_row(*[self._format_cell(row.get(column)) for column in columns])

        self.console.print(table)

    def render_json(self, data: Any) -> None:
        """Render data as JSON."""
        if not data:
            print("[]")
            return
        print(json.dumps(data, indent=2, ensure_ascii=False, default=str))

    def render_yaml(self, data: Any) -> None:
        """Render data as YAML."""
        if not data:
            print("[]")
            return
        try:
            print(yaml.dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False))
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to serialize data to YAML: {e}")

    def _format_cell(self, value: Any) -> str:
        if value is True:
            return "✓ Yes"
        if value is False:
            return "No"
        if value is None:
            return ""
        return escape(str(value))
