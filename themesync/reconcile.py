"""Branch-to-theme reconciliation.

Given the current git branch and the themes in the store, decide whether to
fetch an existing branch theme, create a new one from the live theme, or
refuse to continue, and then carry that decision out.

The decision itself (``decide``) is a pure function so it can be exercised
without any process execution. ``Reconciler`` drives the full state machine::

    IDLE -> LISTING -> DECIDING -> {FETCHING | CREATING | BLOCKED} -> DONE
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence

from rich.console import Console

from .client import RemoteThemeService
from .exceptions import PolicyBlock, ReconciliationFailure, ThemeSyncError
from .models import SyncAction, SyncOutcome, SyncSession, ThemeRecord
from .operations import ThemeSyncOperations
from .render import print_step
from .vcs import current_branch

PROTECTED_BRANCHES = ("main", "master")

# Block reasons
PROTECTED_BRANCH = "protected_branch"
LIVE_THEME_CONFLICT = "live_theme_conflict"

BLOCK_MESSAGES = {
    PROTECTED_BRANCH: "Cannot build on git branch (master|main)",
    LIVE_THEME_CONFLICT: "Cannot edit a branch directly connected to a live theme",
}


class ReconcileState(Enum):
    """Reconciliation states."""
    IDLE = "idle"
    LISTING = "listing"
    DECIDING = "deciding"
    FETCHING = "fetching"
    CREATING = "creating"
    BLOCKED = "blocked"
    DONE = "done"


@dataclass(frozen=True)
class ReconcileDecision:
    """What a reconciliation pass should do for a branch."""

    state: ReconcileState
    branch: str
    theme_id: Optional[str] = None
    theme_name: Optional[str] = None
    source_id: Optional[str] = None
    reason: Optional[str] = None

    @property
    def message(self) -> str:
        if self.state is ReconcileState.BLOCKED:
            return BLOCK_MESSAGES.get(self.reason or "", "Blocked")
        if self.state is ReconcileState.FETCHING:
            return f"Fetch theme {self.theme_id} ({self.theme_name})"
        return f"Create theme '{self.theme_name}' from theme {self.source_id}"


def is_protected(branch: str, protected_branches: Sequence[str] = PROTECTED_BRANCHES) -> bool:
    """Check whether a branch may never be synced."""
    return branch in protected_branches


def blocked_for_protected_branch(branch: str) -> ReconcileDecision:
    return ReconcileDecision(ReconcileState.BLOCKED, branch, reason=PROTECTED_BRANCH)


def find_live_theme(themes: Sequence[ThemeRecord]) -> ThemeRecord:
    """Return the single live theme in a listing.

    Raises:
        ReconciliationFailure: If the listing has no live theme, or more than one
    """
    live = [theme for theme in themes if theme.live]
    if not live:
        raise ReconciliationFailure(
            "No live theme found in the store listing",
            details={"themes": len(themes)},
        )
    if len(live) > 1:
        raise ReconciliationFailure(
            "More than one live theme found in the store listing",
            details={"live_ids": [theme.id for theme in live]},
        )
    return live[0]


def decide(
    branch: str,
    themes: Sequence[ThemeRecord],
    protected_branches: Sequence[str] = PROTECTED_BRANCHES,
) -> ReconcileDecision:
    """Decide how to reconcile ``branch`` against a theme listing.

    Matching is plain, case-sensitive substring containment of the branch
    name in the theme name.

    Args:
        branch: Current git branch
        themes: Themes in the order the store returned them
        protected_branches: Branches that are always blocked

    Returns:
        A FETCHING, CREATING or BLOCKED decision

    Raises:
        ReconciliationFailure: If the listing does not have exactly one live theme
    """
    if is_protected(branch, protected_branches):
        return blocked_for_protected_branch(branch)

    live = find_live_theme(themes)
    if live.matches_branch(branch):
        return ReconcileDecision(
            ReconcileState.BLOCKED,
            branch,
            theme_id=live.id,
            theme_name=live.name,
            reason=LIVE_THEME_CONFLICT,
        )

    for theme in themes:
        if theme.matches_branch(branch):
            return ReconcileDecision(
                ReconcileState.FETCHING,
                branch,
                theme_id=theme.id,
                theme_name=theme.name,
            )

    return ReconcileDecision(
        ReconcileState.CREATING,
        branch,
        theme_name=branch,
        source_id=live.id,
    )


class Reconciler:
    """Runs one reconciliation pass against the remote store."""

    def __init__(
        self,
        service: RemoteThemeService,
        operations: Optional[ThemeSyncOperations] = None,
        branch_resolver: Callable[[], str] = current_branch,
        protected_branches: Sequence[str] = PROTECTED_BRANCHES,
        console: Optional[Console] = None,
    ) -> None:
        """Initialize the reconciler.

        Args:
            service: Remote theme service
            operations: Sync operations, built from ``service`` when omitted
            branch_resolver: Callable returning the current branch name
            protected_branches: Branches that are always blocked
            console: Console for progress messages
        """
        self.service = service
        self.console = console or Console()
        self.operations = operations or ThemeSyncOperations(service, console=self.console)
        self.branch_resolver = branch_resolver
        self.protected_branches = tuple(protected_branches)
        self.state = ReconcileState.IDLE
        self.history: List[ReconcileState] = [ReconcileState.IDLE]

    def _transition(self, state: ReconcileState) -> None:
        self.state = state
        self.history.append(state)

    def plan(self, session: SyncSession) -> ReconcileDecision:
        """Resolve the branch, list themes and decide, without syncing anything.

        The branch is resolved before the listing so a protected branch never
        costs a remote call.
        """
        branch = self.branch_resolver()
        if is_protected(branch, self.protected_branches):
            self._transition(ReconcileState.DECIDING)
            return blocked_for_protected_branch(branch)

        self._transition(ReconcileState.LISTING)
        themes = self.service.list_themes(session.credentials)

        self._transition(ReconcileState.DECIDING)
        return decide(branch, themes, self.protected_branches)

    def run(self, session: SyncSession, dry_run: bool = False) -> ReconcileDecision:
        """Run a full reconciliation pass.

        Args:
            session: Sync session; its ``outcome`` is set on return
            dry_run: Stop after deciding, without touching disk or the store

        Returns:
            The decision that was carried out

        Raises:
            PolicyBlock: If the branch is protected or tied to the live theme
            ReconciliationFailure: If the listing has no usable live theme
            RemoteQueryError: If listing or a sync step fails
            VcsError: If the branch cannot be resolved
        """
        print_step(self.console, "Config", "🔧 Checking shopify themes and comparing them to git repo 🔧")

        try:
            decision = self.plan(session)
            if dry_run:
                return decision

            if decision.state is ReconcileState.BLOCKED:
                raise PolicyBlock(decision.message, reason=decision.reason or "", branch=decision.branch)

            self._transition(decision.state)
            if decision.state is ReconcileState.FETCHING:
                self.operations.fetch_theme(session, decision.theme_id)
                session.outcome = SyncOutcome(
                    action=SyncAction.FETCHED,
                    theme_id=decision.theme_id,
                    theme_name=decision.theme_name,
                )
            else:
                self.operations.create_theme(session, decision.theme_name, decision.source_id)
                session.outcome = SyncOutcome(
                    action=SyncAction.CREATED,
                    theme_name=decision.theme_name,
                )
        except ThemeSyncError as e:
            self._transition(ReconcileState.BLOCKED)
            session.outcome = SyncOutcome(
                action=SyncAction.BLOCKED,
                reason=getattr(e, "reason", None) or e.message,
            )
            raise

        self._transition(ReconcileState.DONE)
        return decision
