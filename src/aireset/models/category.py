"""Reset policies and the categories of files they act on."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ResetPolicy(str, Enum):
    """Named configurations selecting what a reset touches."""

    LIGHT = "light"
    MEDIUM = "medium"
    FULL = "full"
    CUSTOM = "custom"


class CategoryAction(str, Enum):
    """Destructive action applied to a category after archiving."""

    CLEAR = "clear"
    TEMPLATE_RESET = "template-reset"
    NONE = "none"


class Category(BaseModel):
    """A named group of workspace paths governed by one action.

    Attributes:
        name: Logical name, e.g. "memory" or "docs/plans".
        root: Workspace-relative POSIX path of the directory (or file).
        action: What the reset does to the category's files.
        templates: For template-reset, target file name -> template name.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Logical category name")
    root: str = Field(description="Workspace-relative root path")
    action: CategoryAction = Field(description="Destructive action")
    templates: dict[str, str] = Field(
        default_factory=dict, description="Template-reset targets and their template names"
    )

    @property
    def tag(self) -> str:
        """Short description of what happens to this category."""
        if self.action == CategoryAction.CLEAR:
            return "archive+clear"
        if self.action == CategoryAction.TEMPLATE_RESET:
            return "archive+template-reset"
        return "archive-only"

    def archive_only(self) -> "Category":
        """Copy of this category that is archived but never modified."""
        return self.model_copy(update={"action": CategoryAction.NONE, "templates": {}})
