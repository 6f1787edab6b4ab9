"""CLI command implementations for aireset.

This package contains the implementation of each CLI command,
separated from the CLI framework setup in cli.py.
"""

from .archives import archives_app
from .init import init
from .reset import reset
from .restore import restore

__all__ = [
    "archives_app",
    "init",
    "reset",
    "restore",
]
