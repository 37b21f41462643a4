"""Error formatting helpers for themesync.

Turns the exception hierarchy from ``themesync.exceptions`` into messages
suitable for the terminal.
"""

from ..exceptions import (
    ConfigError,
    PolicyBlock,
    ReconciliationFailure,
    RemoteQueryError,
    VcsError,
    WorkspaceError,
)


def format_error_for_user(error: Exception, debug: bool = False) -> str:
    """Format an error message for user display.

    Args:
        error: The exception to format
        debug: Whether to include debug information

    Returns:
        Formatted error message
    """
    if isinstance(error, PolicyBlock):
        message = f"Blocked: {error.message}"
        if error.branch:
            message += f"\nBranch: {error.branch}"
        return message

    if isinstance(error, RemoteQueryError):
        message = f"Theme CLI error: {error.message}"
        if error.returncode is not None:
            message += f"\nExit status: {error.returncode}"
        if debug and error.command:
            message += f"\nCommand: {' '.join(error.command)}"
        if debug and error.stderr:
            message += f"\nOutput: {error.stderr}"
        return message

    if isinstance(error, VcsError):
        return f"Git error: {error.message}"

    if isinstance(error, ReconciliationFailure):
        message = f"Reconciliation failed: {error.message}"
        if debug and error.details:
            message += f"\nDetails: {error.details}"
        return message

    if isinstance(error, WorkspaceError):
        message = f"Workspace error: {error.message}"
        if debug and error.path:
            message += f"\nPath: {error.path}"
        return message

    if isinstance(error, ConfigError):
        return f"Configuration error: {error.message}"

    # Default formatting
    if debug:
        return f"Error: {str(error)}\nType: {type(error).__name__}"
    else:
        return f"Error: {str(error)}"
