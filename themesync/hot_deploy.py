"""Single-file hot deploys with a debounce window.

A watched file change deploys that one file to the store. While a deploy is
pending, further change events are dropped until the window elapses.

The debounce is a small state machine::

    IDLE --offer(file)--> PENDING(file, now + window)
    PENDING --start_window(file), once the deploy returns--> PENDING(file, now + window)
    PENDING --deadline passed--> IDLE

With the ``global`` policy, changes to any file are dropped while PENDING,
including changes to a different file. With the ``per-file`` policy only
changes to a file that is itself pending are dropped.
"""

import threading
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Optional, Union

from rich.console import Console
from rich.markup import escape

from .client import RemoteThemeService
from .exceptions import ThemeSyncError
from .render import print_error, print_step

DEFAULT_WINDOW = 0.5

GLOBAL = "global"
PER_FILE = "per-file"


class DebounceState(Enum):
    """Debounce states."""
    IDLE = "idle"
    PENDING = "pending"


@dataclass(frozen=True)
class HotDeployState:
    """The file most recently deployed and when its window closes."""

    previous_file: str
    deadline: float


class HotDeployDebouncer:
    """Suppresses repeated deploys within a fixed window."""

    def __init__(
        self,
        window: float = DEFAULT_WINDOW,
        policy: str = GLOBAL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the debouncer.

        Args:
            window: Debounce window in seconds
            policy: ``global`` or ``per-file``
            clock: Monotonic time source
        """
        if policy not in (GLOBAL, PER_FILE):
            raise ValueError(f"Unknown debounce policy: {policy}")
        self.window = window
        self.policy = policy
        self.clock = clock
        self._pending: Dict[str, HotDeployState] = {}
        self._lock = threading.Lock()

    def _expire(self, now: float) -> None:
        self._pending = {
            key: pending for key, pending in self._pending.items() if now < pending.deadline
        }

    def _key(self, file: str) -> str:
        return file if self.policy == PER_FILE else ""

    @property
    def state(self) -> DebounceState:
        """Current state, after expiring windows that have elapsed."""
        with self._lock:
            self._expire(self.clock())
            return DebounceState.PENDING if self._pending else DebounceState.IDLE

    @property
    def previous_file(self) -> Optional[str]:
        """The most recently accepted file still inside its window."""
        with self._lock:
            self._expire(self.clock())
            if not self._pending:
                return None
            return max(self._pending.values(), key=lambda p: p.deadline).previous_file

    def offer(self, file: str) -> bool:
        """Offer a changed file.

        An accepted file holds its slot for one window from now; call
        ``start_window`` once the deploy has finished to restart the window
        from that point.

        Returns:
            True if the file should be deployed now, False if it is dropped
        """
        with self._lock:
            now = self.clock()
            self._expire(now)
            key = self._key(file)
            if key in self._pending:
                return False
            self._pending[key] = HotDeployState(previous_file=file, deadline=now + self.window)
            return True

    def start_window(self, file: str) -> None:
        """Restart the window for an accepted file from the current time."""
        with self._lock:
            self._pending[self._key(file)] = HotDeployState(
                previous_file=file, deadline=self.clock() + self.window
            )

    def reset(self) -> None:
        """Return to IDLE immediately."""
        with self._lock:
            self._pending.clear()


class HotDeployer:
    """Deploys changed theme files one at a time."""

    def __init__(
        self,
        service: RemoteThemeService,
        dist_dir: Path,
        debouncer: Optional[HotDeployDebouncer] = None,
        extension: str = ".liquid",
        console: Optional[Console] = None,
    ) -> None:
        """Initialize the deployer.

        Args:
            service: Remote theme service
            dist_dir: Distribution directory the changed files live in
            debouncer: Debouncer, a global 0.5s one when omitted
            extension: Only files with this extension are deployed
            console: Console for progress messages
        """
        self.service = service
        self.dist_dir = dist_dir
        self.debouncer = debouncer or HotDeployDebouncer()
        self.extension = extension
        self.console = console or Console()

    def relative_path(self, file: Union[str, Path]) -> Optional[str]:
        """Return ``file`` relative to the distribution directory, or None if outside it."""
        path = Path(file).resolve()
        try:
            return path.relative_to(self.dist_dir.resolve()).as_posix()
        except ValueError:
            return None

    def handle_change(self, file: Union[str, Path]) -> bool:
        """Deploy a changed file if it passes the extension filter and the debounce.

        The debounce window starts when the deploy returns, whether it
        succeeded or not, so a slow deploy does not let duplicates through.
        Deploy failures are reported and swallowed.

        Returns:
            True if a deploy was attempted
        """
        if Path(file).suffix != self.extension:
            return False

        relative = self.relative_path(file)
        if relative is None:
            return False

        if not self.debouncer.offer(relative):
            return False

        print_step(self.console, "Shopify", f"Updating [underline blue]{escape(relative)}[/underline blue] ...", compact=True)
        try:
            self.service.deploy(self.dist_dir, relative)
        except ThemeSyncError as e:
            print_error(self.console, "Error", f"Failed to deploy {relative}: {e.message}")
            return True
        finally:
            self.debouncer.start_window(relative)

        print_step(self.console, "Shopify", "Deployed", compact=True)
        return True
