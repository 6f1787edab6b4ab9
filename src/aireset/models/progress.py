"""Progress events emitted by archive creation and extraction."""

from collections.abc import Callable
from dataclasses import dataclass

PHASE_COUNTING = "counting"
PHASE_METADATA = "metadata"
PHASE_COMPLETE = "complete"


@dataclass(frozen=True)
class ProgressEvent:
    """Snapshot of a long-running copy.

    Phases run counting -> one phase per category (named after it) ->
    metadata -> complete. ``total`` is fixed once counting finishes.
    """

    phase: str
    total: int
    processed: int


ProgressCallback = Callable[[ProgressEvent], None]
