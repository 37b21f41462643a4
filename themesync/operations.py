"""Theme sync operations.

Fetching an existing branch theme and creating a new one seeded from the
live theme. Each operation is a fixed sequence of theme CLI calls run one
after another; the first failure stops the sequence.
"""

import shutil
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from rich.console import Console
from rich.markup import escape

from .client import RemoteThemeService
from .exceptions import WorkspaceError
from .models import SyncSession
from .render import print_step


def clean_directory(path: Path) -> None:
    """Remove everything inside ``path``, creating it if it does not exist."""
    path.mkdir(parents=True, exist_ok=True)
    for child in path.iterdir():
        if child.is_dir() and not child.is_symlink():
            shutil.rmtree(child)
        else:
            child.unlink()


@contextmanager
def workspace(path: Path) -> Iterator[None]:
    """Turn filesystem failures while preparing ``path`` into ``WorkspaceError``."""
    try:
        yield
    except OSError as e:
        raise WorkspaceError(f"Could not prepare {path}: {e.strerror or e}", path=str(path)) from e


class ThemeSyncOperations:
    """Multi-step sync procedures between the distribution directory and the store."""

    def __init__(self, service: RemoteThemeService, console: Optional[Console] = None) -> None:
        """Initialize sync operations.

        Args:
            service: Remote theme service
            console: Console for progress messages
        """
        self.service = service
        self.console = console or Console()

    def fetch_theme(self, session: SyncSession, theme_id: str) -> None:
        """Pull an existing remote theme into the distribution directory.

        Safe to re-run against the same directory.

        Args:
            session: Current sync session
            theme_id: Remote id of the branch theme

        Raises:
            RemoteQueryError: If the download fails
            WorkspaceError: If the distribution directory cannot be created
        """
        print_step(self.console, "Fetch", "Found theme on shopify; fetching theme files ...")
        with workspace(session.dist_dir):
            session.dist_dir.mkdir(parents=True, exist_ok=True)
        self.service.get_theme(
            session.credentials,
            theme_id,
            session.dist_dir,
            ignored_files=session.ignored_files,
        )
        print_step(self.console, "Fetch", "✨✨ Theme Fetched ✨✨")

    def create_theme(self, session: SyncSession, name: str, source_id: str) -> None:
        """Create a new remote theme named ``name`` seeded from ``source_id``.

        The distribution directory is emptied and refilled from the source
        theme, a new theme is created from a scratch directory, and the
        distribution directory is deployed into it. A remote theme created
        before a later step fails is left as it is.

        Args:
            session: Current sync session
            name: Name of the new theme
            source_id: Id of the theme to copy content from, normally the live theme

        Raises:
            RemoteQueryError: If any CLI step fails
            WorkspaceError: If a local directory cannot be cleaned or created
        """
        dist = session.dist_dir
        shown_name = f"[blue underline]{escape(name)}[/blue underline]"

        print_step(
            self.console,
            "Create",
            f"Couldnt find a theme related to this git branch; so going to create one with name {shown_name}",
            compact=True,
        )
        print_step(self.console, "Create", f"Cleaning current directory at [blue underline]{escape(str(dist))}[/blue underline] ...")
        with workspace(dist):
            clean_directory(dist)

        print_step(self.console, "Create", "Cleaned; Syncing theme code to the published theme ...")
        self.service.get_theme(
            session.credentials,
            source_id,
            dist,
            ignored_files=session.ignored_files,
            allow_live=True,
        )

        print_step(self.console, "Create", f"Synced; Creating shopify theme named {shown_name}...")
        with workspace(session.build_dir):
            session.build_dir.mkdir(parents=True, exist_ok=True)
        try:
            self.service.create_theme(session.credentials, name, session.build_dir)
        finally:
            shutil.rmtree(session.build_dir, ignore_errors=True)

        print_step(self.console, "Create", f"Theme created called {shown_name}; Cleaning up and deploying theme to shopify ...")
        self.service.deploy(dist)
        print_step(self.console, "Create", "✨✨ Theme Deployed and Synced ✨✨")
