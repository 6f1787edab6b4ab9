"""Git operations used for archive provenance."""

import subprocess
from pathlib import Path

from ..constants import GIT_TIMEOUT


class GitError(Exception):
    """Git command failed."""

    pass


def run_git(*args: str, cwd: Path, timeout: int | None = None) -> str:
    """Run a git command and return its stripped stdout.

    Args:
        *args: Arguments passed to git
        cwd: Working directory
        timeout: Optional timeout in seconds (default: GIT_TIMEOUT)

    Returns:
        Command stdout without surrounding whitespace

    Raises:
        GitError: If git is missing, times out or exits non-zero
    """
    timeout = timeout or GIT_TIMEOUT
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        raise GitError(f"git {' '.join(args)} timed out after {timeout} seconds") from e
    except (FileNotFoundError, NotADirectoryError) as e:
        raise GitError(f"git not available: {e}") from e
    if result.returncode != 0:
        raise GitError(f"git {' '.join(args)} failed: {result.stderr.strip()}")
    return result.stdout.strip()


def get_head_sha(cwd: Path) -> str:
    """Get the current HEAD commit SHA."""
    return run_git("rev-parse", "HEAD", cwd=cwd)


def get_current_branch(cwd: Path) -> str:
    """Get the current branch name.

    Raises:
        GitError: On failure, or when HEAD is detached (no branch name)
    """
    branch = run_git("branch", "--show-current", cwd=cwd)
    if not branch:
        raise GitError("HEAD is detached")
    return branch
