"""Command modules for the themesync CLI.

This module exports the command group and the top-level commands that are
registered with the main application.
"""

from .themes import app as themes_app
from .dev import start, watch, deploy

__all__ = [
    "themes_app",
    "start",
    "watch",
    "deploy",
]
