"""External service integrations for aireset.

This package provides interfaces to external tools and the filesystem:
- git: revision and branch lookup for archive provenance
- filesystem: deterministic file walking and binary-safe copies
"""

from .filesystem import copy_file, dir_is_nonempty, ensure_directory, iter_files
from .git import GitError, get_current_branch, get_head_sha, run_git

__all__ = [
    "GitError",
    "copy_file",
    "dir_is_nonempty",
    "ensure_directory",
    "get_current_branch",
    "get_head_sha",
    "iter_files",
    "run_git",
]
