"""Data models for themesync.

Pydantic models for remote themes and for the state of a reconciliation
pass.
"""

from .theme import ThemeRecord
from .session import Credentials, SyncAction, SyncOutcome, SyncSession

__all__ = [
    "ThemeRecord",
    "Credentials",
    "SyncAction",
    "SyncOutcome",
    "SyncSession",
]
