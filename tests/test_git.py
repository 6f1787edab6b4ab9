"""Tests for git operations."""

import subprocess
from pathlib import Path
from unittest import mock

import pytest

from aireset.services.git import GitError, get_current_branch, get_head_sha, run_git


class TestRunGit:
    """Tests for run_git function."""

    @pytest.mark.slow
    def test_simple_command(self, temp_git_repo: Path) -> None:
        """run_git should execute git commands."""
        result = run_git("status", cwd=temp_git_repo)
        assert "On branch" in result

    @pytest.mark.slow
    def test_raises_on_failure(self, temp_git_repo: Path) -> None:
        """run_git should raise on a non-zero exit."""
        with pytest.raises(GitError, match="failed"):
            run_git("checkout", "nonexistent-branch", cwd=temp_git_repo)

    def test_timeout(self, tmp_path: Path) -> None:
        """A timeout is reported as GitError."""
        with (
            mock.patch(
                "subprocess.run", side_effect=subprocess.TimeoutExpired(cmd="git", timeout=1)
            ),
            pytest.raises(GitError, match="timed out"),
        ):
            run_git("status", cwd=tmp_path, timeout=1)

    def test_git_missing(self, tmp_path: Path) -> None:
        """A missing git binary is reported as GitError."""
        with (
            mock.patch("subprocess.run", side_effect=FileNotFoundError("git")),
            pytest.raises(GitError, match="not available"),
        ):
            run_git("status", cwd=tmp_path)


@pytest.mark.slow
class TestProvenanceLookups:
    """Tests for revision and branch lookups."""

    def test_head_sha(self, temp_git_repo: Path) -> None:
        """get_head_sha returns the full commit SHA."""
        assert len(get_head_sha(temp_git_repo)) == 40

    def test_current_branch(self, temp_git_repo: Path) -> None:
        """get_current_branch returns the checked-out branch."""
        expected = subprocess.run(
            ["git", "branch", "--show-current"],
            cwd=temp_git_repo,
            capture_output=True,
            text=True,
            check=True,
        ).stdout.strip()
        assert get_current_branch(temp_git_repo) == expected

    def test_detached_head(self, temp_git_repo: Path) -> None:
        """A detached HEAD has no branch name."""
        sha = get_head_sha(temp_git_repo)
        run_git("checkout", "--detach", sha, cwd=temp_git_repo)
        with pytest.raises(GitError, match="detached"):
            get_current_branch(temp_git_repo)

    def test_outside_repository(self, tmp_path: Path) -> None:
        """Lookups outside a repository raise GitError."""
        with pytest.raises(GitError):
            get_head_sha(tmp_path)
