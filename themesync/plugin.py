"""Host build-tool hooks.

``ThemeSyncPlugin`` is the object a host dev server talks to: it runs the
startup reconciliation once, toggles HTTPS on the dev server config, and
turns file-change notifications into single-file deploys.
"""

from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from rich.console import Console

from .client import RemoteThemeService, ThemeKitClient
from .config import Settings, load_environment, resolve_credentials
from .exceptions import ThemeSyncError
from .hot_deploy import HotDeployDebouncer, HotDeployer
from .models import SyncSession
from .reconcile import ReconcileDecision, Reconciler
from .render import print_banner, print_dev_ready, print_error, print_step
from .utils.exceptions import format_error_for_user
from .vcs import current_branch


class ThemeSyncPlugin:
    """Lifecycle hooks that keep a local theme directory in step with the store."""

    name = "themesync"

    def __init__(
        self,
        settings: Optional[Settings] = None,
        service: Optional[RemoteThemeService] = None,
        branch_resolver: Callable[[], str] = current_branch,
        console: Optional[Console] = None,
        debug: bool = False,
        show_banner: bool = True,
    ) -> None:
        """Initialize the plugin and load the environment file.

        Args:
            settings: Project settings, defaults when omitted
            service: Remote theme service, a ``ThemeKitClient`` when omitted
            branch_resolver: Callable returning the current branch name
            console: Console for all output
            debug: Whether to print debug details
            show_banner: Whether to print the startup banner
        """
        self.settings = settings or Settings()
        self.console = console or Console()
        self.debug = debug
        self.service = service or ThemeKitClient(
            command=self.settings.theme_command,
            console=self.console,
            debug=debug,
        )
        self.branch_resolver = branch_resolver

        if show_banner:
            print_banner(self.console)

        self.env = load_environment(self.settings.env_file, console=self.console)
        self.ready = False
        self._announced = False
        self.session: Optional[SyncSession] = None
        self.hot_deployer = HotDeployer(
            self.service,
            self.settings.dist_dir,
            debouncer=HotDeployDebouncer(
                window=self.settings.debounce_window,
                policy=self.settings.debounce_policy,
            ),
            extension=self.settings.watched_extension,
            console=self.console,
        )

    def new_session(self) -> SyncSession:
        """Build a sync session from the settings and the loaded environment.

        Raises:
            ConfigError: If the credential or store key is missing
        """
        return SyncSession(
            dist_dir=self.settings.dist_dir,
            build_dir=self.settings.build_dir,
            credentials=resolve_credentials(self.env, self.settings),
            ignored_files=list(self.settings.ignored_files),
        )

    def build_start(self, dry_run: bool = False) -> ReconcileDecision:
        """Run the startup reconciliation pass.

        Args:
            dry_run: Only decide, do not sync

        Returns:
            The decision that was carried out

        Raises:
            ThemeSyncError: Any failure, after it has been reported
        """
        reconciler = Reconciler(
            self.service,
            branch_resolver=self.branch_resolver,
            protected_branches=self.settings.protected_branches,
            console=self.console,
        )
        try:
            self.session = self.new_session()
            decision = reconciler.run(self.session, dry_run=dry_run)
        except ThemeSyncError as e:
            print_error(self.console, "Error", format_error_for_user(e, self.debug))
            raise

        self.ready = not dry_run
        return decision

    def config(self, user_config: Dict[str, Any]) -> None:
        """Turn HTTPS on for the dev server if it is off."""
        server = user_config.setdefault("server", {})
        if not server.get("https"):
            print_step(self.console, "Config", "Https wasnt turned on; Doing so now ...")
            server["https"] = True

    def handle_hot_update(self, file: Union[str, Path]) -> bool:
        """Handle a changed file reported by the host.

        Events that arrive before the startup pass has finished are ignored.

        Returns:
            True if a deploy was attempted
        """
        if not self.ready:
            return False

        if not self._announced:
            self._announced = True
            print_dev_ready(self.console, self.settings.dist_dir.as_posix())

        return self.hot_deployer.handle_change(file)
