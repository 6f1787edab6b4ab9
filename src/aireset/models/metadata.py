"""Archive metadata models.

The metadata file (archive-info.json) is the archive's commit marker and
its self-description. Keys are camelCase on disk; Python code uses the
snake_case attribute names.
"""

from enum import Enum
from typing import Annotated

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field

from ..constants import GENERATOR, UNKNOWN
from .category import CategoryAction

Count = Annotated[int, Field(strict=True, ge=0)]


class ArchiveOperation(str, Enum):
    """Operation that produced an archive."""

    LIGHT = "light"
    MEDIUM = "medium"
    FULL = "full"
    CUSTOM = "custom"
    ARCHIVE = "archive"
    PRE_RESTORE = "pre-restore"


class SourceInfo(BaseModel):
    """Where and by whom the archive was taken. Provenance is best effort."""

    model_config = ConfigDict(populate_by_name=True)

    path: str = Field(description="Workspace root at archive time")
    vcs_revision: str = Field(default=UNKNOWN, alias="vcsRevision")
    vcs_branch: str = Field(default=UNKNOWN, alias="vcsBranch")
    user: str = UNKNOWN
    platform: str = UNKNOWN


class CategoryRecord(BaseModel):
    """Category as recorded in an archive."""

    name: str
    root: str
    action: CategoryAction = CategoryAction.NONE


class FileCounts(BaseModel):
    """Per-category file counts plus the total."""

    categories: dict[str, Count] = Field(default_factory=dict)
    total: Count = 0


class ContentsInfo(BaseModel):
    """Inventory of the archive's contents."""

    model_config = ConfigDict(populate_by_name=True)

    directories: list[str] = Field(description="Archived category roots")
    categories: list[CategoryRecord] = Field(default_factory=list)
    files: FileCounts
    total_size: Count = Field(alias="totalSize")


class RestorationInfo(BaseModel):
    """Who can restore the archive and what they need."""

    compatible: list[str]
    requirements: list[str]


class ArchiveDetails(BaseModel):
    """Producer information; optional in the schema."""

    model_config = ConfigDict(populate_by_name=True)

    generator: str = GENERATOR
    generator_version: str = Field(default=UNKNOWN, alias="generatorVersion")
    archive_name: str | None = Field(default=None, alias="archiveName")
    restoration_source: str | None = Field(default=None, alias="restorationSource")


class ArchiveMetadata(BaseModel):
    """Descriptor written to <archive>/archive-info.json.

    Attributes:
        version: Metadata schema version.
        created: Archive creation instant (timezone aware).
        operation: Reset policy or operation that produced the archive.
        source: Provenance of the archived workspace.
        contents: Archived directories, file counts and total size.
        restoration: Compatible tools and restore preconditions.
        details: Generator name/version and archive naming info.
    """

    version: str = Field(min_length=1)
    created: AwareDatetime
    operation: ArchiveOperation
    source: SourceInfo
    contents: ContentsInfo
    restoration: RestorationInfo
    details: ArchiveDetails = Field(default_factory=ArchiveDetails)


class Violation(BaseModel):
    """A single metadata schema defect."""

    field: str
    message: str


class ValidationResult(BaseModel):
    """Outcome of validating metadata: valid, or invalid with every violation."""

    violations: list[Violation] = Field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.violations
