"""Results returned by the reset orchestrator."""

from pathlib import Path

from pydantic import BaseModel, Field

from .category import ResetPolicy
from .metadata import ArchiveMetadata


class ArchiveEntry(BaseModel):
    """An archive directory as seen by list_archives.

    Invalid archives are listed too: ``metadata`` is None when the
    metadata file is missing or unreadable and ``error`` says why.
    """

    name: str
    path: Path
    metadata: ArchiveMetadata | None = None
    valid: bool = False
    error: str | None = None


class ResetResult(BaseModel):
    """Outcome of perform_reset.

    Attributes:
        policy: Policy that was applied.
        archive_id: Archive created before the reset (None if skipped or
            already evicted by the retention limit).
        cleared: Workspace-relative paths of deleted files.
        reset: Workspace-relative paths of files rewritten from templates.
        evicted: Archive ids removed by retention or bulk clearing.
    """

    policy: ResetPolicy
    archive_id: str | None = None
    cleared: list[str] = Field(default_factory=list)
    reset: list[str] = Field(default_factory=list)
    evicted: list[str] = Field(default_factory=list)


class RestoreResult(BaseModel):
    """Outcome of restore_from_archive."""

    restored_from: str
    safety_archive_id: str
    files_restored: int = 0
