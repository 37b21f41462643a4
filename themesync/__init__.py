"""themesync package.

A development-time tool that keeps a local theme directory in sync with the
store theme for the current git branch, and deploys changed theme files as
they are edited.
"""

__version__ = "0.1.0"
__description__ = "Branch-aware theme sync and hot deploy for storefront themes"

# Re-export main classes for convenience
from .client import RemoteThemeService, ThemeKitClient, parse_theme_listing
from .config import Settings, load_environment, load_settings, resolve_credentials
from .hot_deploy import DebounceState, HotDeployDebouncer, HotDeployer
from .models import Credentials, SyncAction, SyncOutcome, SyncSession, ThemeRecord
from .operations import ThemeSyncOperations
from .plugin import ThemeSyncPlugin
from .reconcile import ReconcileDecision, ReconcileState, Reconciler, decide
from .vcs import current_branch
from .exceptions import (
    ThemeSyncError,
    ConfigError,
    VcsError,
    RemoteQueryError,
    PolicyBlock,
    ReconciliationFailure,
    WorkspaceError,
)

__all__ = [
    "__version__",
    "__description__",
    "RemoteThemeService",
    "ThemeKitClient",
    "parse_theme_listing",
    "Settings",
    "load_environment",
    "load_settings",
    "resolve_credentials",
    "DebounceState",
    "HotDeployDebouncer",
    "HotDeployer",
    "Credentials",
    "SyncAction",
    "SyncOutcome",
    "SyncSession",
    "ThemeRecord",
    "ThemeSyncOperations",
    "ThemeSyncPlugin",
    "ReconcileDecision",
    "ReconcileState",
    "Reconciler",
    "decide",
    "current_branch",
    "ThemeSyncError",
    "ConfigError",
    "VcsError",
    "RemoteQueryError",
    "PolicyBlock",
    "ReconciliationFailure",
    "WorkspaceError",
]
