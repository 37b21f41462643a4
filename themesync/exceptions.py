"""Exception classes for themesync.

This module defines the exception hierarchy raised by the reconciliation
core, the theme CLI adapter and the configuration layer.
"""

from typing import Optional, Dict, Any, List


class ThemeSyncError(Exception):
    """Base exception class for all themesync errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message
            details: Optional additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigError(ThemeSyncError):
    """Exception raised for configuration-related errors."""
    pass


class VcsError(ThemeSyncError):
    """Exception raised when the current git branch cannot be determined."""
    pass


class RemoteQueryError(ThemeSyncError):
    """Exception raised when a theme CLI call cannot be completed."""

    def __init__(
        self,
        message: str,
        command: Optional[List[str]] = None,
        returncode: Optional[int] = None,
        stderr: str = "",
        **kwargs: Any
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message
            command: Command line that failed, credentials redacted
            returncode: Exit status of the process, if it ran
            stderr: Captured standard error
            **kwargs: Additional arguments passed to parent class
        """
        super().__init__(message, **kwargs)
        self.command = command or []
        self.returncode = returncode
        self.stderr = stderr


class PolicyBlock(ThemeSyncError):
    """Exception raised when the branch/theme policy forbids syncing."""

    def __init__(self, message: str, reason: str, branch: Optional[str] = None, **kwargs: Any) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message
            reason: Machine-readable block reason
            branch: Branch the block applies to
            **kwargs: Additional arguments passed to parent class
        """
        super().__init__(message, **kwargs)
        self.reason = reason
        self.branch = branch


class ReconciliationFailure(ThemeSyncError):
    """Exception raised when the remote listing is in an unusable state."""
    pass


class WorkspaceError(ThemeSyncError):
    """Exception raised when a local theme directory cannot be prepared."""

    def __init__(self, message: str, path: Optional[str] = None, **kwargs: Any) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message
            path: Directory the failing step worked on
            **kwargs: Additional arguments passed to parent class
        """
        super().__init__(message, **kwargs)
        self.path = path
