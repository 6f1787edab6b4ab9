"""Error taxonomy for aireset.

Every error carries the operation that failed and a list of remediation
hints so the command layer can render them without knowing the cause.
"""

import errno
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Violation


class AiresetError(Exception):
    """Base exception for archive, reset and restore failures."""

    def __init__(
        self,
        message: str,
        operation: str = "unknown",
        suggestions: list[str] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.suggestions = list(suggestions or [])

    def to_dict(self) -> dict[str, object]:
        """Structured form used for JSON output."""
        return {
            "code": type(self).__name__,
            "message": self.message,
            "operation": self.operation,
            "suggestions": self.suggestions,
        }


class InvalidInputError(AiresetError):
    """Raised for a bad policy, archive name, path or workspace."""


class ArchiveNotFoundError(AiresetError):
    """Raised when the named archive does not exist."""


class InvalidArchiveError(AiresetError):
    """Raised when an archive fails structural or metadata validation."""


class ArchiveIOError(AiresetError):
    """Raised when a filesystem operation fails (permissions, disk, paths)."""

    def __init__(
        self,
        message: str,
        operation: str = "unknown",
        suggestions: list[str] | None = None,
        path: Path | None = None,
    ) -> None:
        super().__init__(message, operation, suggestions)
        self.path = path

    @classmethod
    def from_os_error(cls, error: OSError, operation: str, path: Path) -> "ArchiveIOError":
        """Wrap an OSError with hints chosen from its errno."""
        if error.errno == errno.ENOENT:
            hints = ["Verify the file or directory exists", "Check the path spelling"]
        elif error.errno in (errno.EACCES, errno.EPERM):
            hints = ["Check file permissions", "Run with appropriate privileges if needed"]
        elif error.errno == errno.EEXIST:
            hints = ["File or directory already exists", "Use a different name"]
        elif error.errno == errno.ENOSPC:
            hints = ["Free disk space and retry"]
        else:
            hints = ["Check file system permissions", "Verify disk space availability"]
        return cls(
            f"File system operation failed: {operation} on {path}: {error.strerror or error}",
            operation=operation,
            suggestions=hints,
            path=path,
        )


class MetadataValidationError(AiresetError):
    """Raised when metadata fails schema validation.

    Carries every violation found, not just the first.
    """

    def __init__(self, violations: "list[Violation]", operation: str = "validate_metadata"):
        self.violations = list(violations)
        summary = "; ".join(f"{v.field}: {v.message}" for v in self.violations)
        super().__init__(
            f"Metadata validation failed: {summary}",
            operation=operation,
            suggestions=[f"Fix: {v.field} ({v.message})" for v in self.violations],
        )

    def to_dict(self) -> dict[str, object]:
        data = super().to_dict()
        data["violations"] = [v.model_dump() for v in self.violations]
        return data


class LockError(AiresetError):
    """Raised when another process holds the workspace lock."""
