"""Pydantic data models for aireset.

This package defines the data structures used throughout aireset for:
- Reset policies and categories (ResetPolicy, Category, CategoryAction)
- Archive metadata and its validation result (ArchiveMetadata, Violation)
- Progress events for long-running copies (ProgressEvent)
- Orchestrator results (ResetResult, RestoreResult, ArchiveEntry)
- The workspace lock (Lock)

Example:
    >>> from aireset.models import ArchiveMetadata
    >>> metadata.model_dump_json(by_alias=True, indent=2)
"""

from .category import Category, CategoryAction, ResetPolicy
from .lock import Lock
from .metadata import (
    ArchiveDetails,
    ArchiveMetadata,
    ArchiveOperation,
    CategoryRecord,
    ContentsInfo,
    FileCounts,
    RestorationInfo,
    SourceInfo,
    ValidationResult,
    Violation,
)
from .progress import (
    PHASE_COMPLETE,
    PHASE_COUNTING,
    PHASE_METADATA,
    ProgressCallback,
    ProgressEvent,
)
from .results import ArchiveEntry, ResetResult, RestoreResult

__all__ = [
    "PHASE_COMPLETE",
    "PHASE_COUNTING",
    "PHASE_METADATA",
    "ArchiveDetails",
    "ArchiveEntry",
    "ArchiveMetadata",
    "ArchiveOperation",
    "Category",
    "CategoryAction",
    "CategoryRecord",
    "ContentsInfo",
    "FileCounts",
    "Lock",
    "ProgressCallback",
    "ProgressEvent",
    "ResetPolicy",
    "ResetResult",
    "RestorationInfo",
    "RestoreResult",
    "SourceInfo",
    "ValidationResult",
    "Violation",
]
