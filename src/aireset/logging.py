"""Logging setup for the aireset command line.

Log records go to stderr through rich; command results go to stdout
through the OutputContext, so ``--json`` output stays machine-readable
whatever the verbosity.
"""

import logging
from enum import IntEnum

from rich.console import Console
from rich.logging import RichHandler


class LogLevel(IntEnum):
    """Root log level selected by -q and -v."""

    DEFAULT = logging.WARNING
    VERBOSE = logging.INFO
    DEBUG = logging.DEBUG


def level_for(verbosity: int = 0, quiet: bool = False) -> LogLevel:
    """Pick the root level; -q wins over any number of -v."""
    if quiet or verbosity <= 0:
        return LogLevel.DEFAULT
    if verbosity == 1:
        return LogLevel.VERBOSE
    return LogLevel.DEBUG


def configure_logging(
    verbosity: int = 0,
    quiet: bool = False,
    no_color: bool = False,
) -> Console:
    """Install a rich handler on the root logger.

    Without flags only warnings show, such as a reset run with
    --no-archive or a stale lock being replaced. -v adds the archive and
    restore steps; -vv adds per-file detail with timestamps and source
    locations.

    Args:
        verbosity: Number of -v flags
        quiet: Keep the default level even when -v is given
        no_color: Disable colored log output

    Returns:
        The stderr console the handler writes to
    """
    level = level_for(verbosity, quiet)
    detailed = level == LogLevel.DEBUG
    console = Console(stderr=True, no_color=no_color)
    handler = RichHandler(console=console, show_time=detailed, show_path=detailed)

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[handler],
        force=True,
    )

    return console
