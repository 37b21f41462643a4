"""Utility modules for themesync.

This package contains helpers for running external commands and for
formatting errors for the terminal.
"""

from .exceptions import format_error_for_user
from .shell import run_command, redact

__all__ = [
    "format_error_for_user",
    "run_command",
    "redact",
]
