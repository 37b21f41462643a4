"""Remote theme store client.

This module defines the ``RemoteThemeService`` interface used by the
reconciliation engine, the parser for the textual theme listing, and
``ThemeKitClient``, the adapter that shells out to the Theme Kit CLI.
"""

import re
from pathlib import Path
from typing import List, Optional, Sequence

from rich.console import Console
from typing_extensions import Protocol

from .exceptions import RemoteQueryError
from .models import Credentials, ThemeRecord
from .utils.shell import EXIT_NOT_FOUND, redact, run_command

# "[<id>]", optionally followed directly by a status marker such as "[live]", then the name
_LISTING_LINE = re.compile(r"\[(?P<id>[^\]]*)\](?:\[(?P<marker>[^\]]*)\])?\s*(?P<name>.*)")

LIVE_MARKER = "live"


def parse_theme_listing(text: str) -> List[ThemeRecord]:
    """Parse the output of ``theme get --list`` into theme records.

    Lines without a bracketed id, or without a name, are skipped. The order
    of the listing is kept. Only a bracket written directly after the id is a
    status marker; one that follows a space is part of the name.

    Args:
        text: Raw listing output

    Returns:
        Parsed theme records

    Examples:
        >>> parse_theme_listing("[42][live] My Theme")
        [ThemeRecord(id='42', name='My Theme', live=True)]
    """
    themes = []
    for line in text.splitlines():
        match = _LISTING_LINE.search(line)
        if not match:
            continue

        theme_id = match.group("id").strip()
        name = match.group("name").strip()
        if not theme_id or not name:
            continue

        marker = (match.group("marker") or "").strip()
        themes.append(ThemeRecord(id=theme_id, name=name, live=marker == LIVE_MARKER))

    return themes


class RemoteThemeService(Protocol):
    """Operations the sync core needs from the remote theme store."""

    def list_themes(self, credentials: Credentials) -> List[ThemeRecord]:
        ...

    def get_theme(
        self,
        credentials: Credentials,
        theme_id: str,
        dest_dir: Path,
        ignored_files: Sequence[str] = (),
        allow_live: bool = False,
    ) -> None:
        ...

    def create_theme(self, credentials: Credentials, name: str, dest_dir: Path) -> None:
        ...

    def deploy(self, dest_dir: Path, file: Optional[str] = None) -> None:
        ...


class ThemeKitClient:
    """``RemoteThemeService`` backed by the ``theme`` command line tool."""

    def __init__(
        self,
        command: str = "theme",
        console: Optional[Console] = None,
        debug: bool = False,
    ) -> None:
        """Initialize the client.

        Args:
            command: Theme Kit executable
            console: Console for debug output
            debug: Whether to echo every command before running it
        """
        self.command = command
        self.console = console or Console()
        self.debug = debug

    def list_themes(self, credentials: Credentials) -> List[ThemeRecord]:
        """List every theme in the store, in the order the service returns."""
        output = self._run(
            ["get", "--list", *self._auth_args(credentials)],
            credentials,
        )
        return parse_theme_listing(output)

    def get_theme(
        self,
        credentials: Credentials,
        theme_id: str,
        dest_dir: Path,
        ignored_files: Sequence[str] = (),
        allow_live: bool = False,
    ) -> None:
        """Download a theme into ``dest_dir``.

        Args:
            credentials: Store credentials
            theme_id: Remote theme id
            dest_dir: Directory the files are written to
            ignored_files: Patterns that are not transferred
            allow_live: Permit pulling from the live theme
        """
        args = ["get", *self._auth_args(credentials), f"-t={theme_id}", f"-d={dest_dir}"]
        if allow_live:
            args.append("--allow-live")
        args.extend(f"--ignored-file={pattern}" for pattern in ignored_files)
        self._run(args, credentials)

    def create_theme(self, credentials: Credentials, name: str, dest_dir: Path) -> None:
        """Create a new, empty remote theme, using ``dest_dir`` as its workspace."""
        self._run(
            ["new", *self._auth_args(credentials), f"-n={name}", f"-d={dest_dir}"],
            credentials,
        )

    def deploy(self, dest_dir: Path, file: Optional[str] = None) -> None:
        """Deploy ``dest_dir``, or a single file inside it, without deleting remote files."""
        args = ["deploy"]
        if file:
            args.append(file)
        args.extend(["-n", f"-d={dest_dir}"])
        self._run(args)

    def _auth_args(self, credentials: Credentials) -> List[str]:
        return [f"-p={credentials.secret()}", f"-s={credentials.store}"]

    def _run(self, args: List[str], credentials: Optional[Credentials] = None) -> str:
        """Run a Theme Kit command and return its stdout.

        Raises:
            RemoteQueryError: If the command cannot be started or exits non-zero
        """
        command = [self.command, *args]
        secrets = [credentials.secret()] if credentials else []
        shown = redact(command, secrets)

        if self.debug:
            self.console.print(f"[dim]$ {' '.join(shown)}[/dim]")

        returncode, stdout, stderr = run_command(command)

        if returncode == EXIT_NOT_FOUND and not stdout:
            raise RemoteQueryError(
                f"Could not run '{self.command}': {stderr}",
                command=shown,
                returncode=returncode,
                stderr=stderr,
            )
        if returncode != 0:
            raise RemoteQueryError(
                f"'{' '.join(shown[:2])}' failed",
                command=shown,
                returncode=returncode,
                stderr="".join(redact([stderr], secrets)),
            )

        return stdout
