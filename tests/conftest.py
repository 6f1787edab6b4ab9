"""Shared test fixtures for aireset tests."""

import os
import subprocess
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
from typer.testing import CliRunner

from aireset.config import ResetConfig

LESSONS_TEMPLATE = "# Lessons\n\nProject: [PROJECT]\nLast reset: [DATE]\n"
DECISIONS_TEMPLATE = "# Decisions\n\nLast reset: [DATE]\n"


@pytest.fixture
def runner() -> CliRunner:
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def temp_git_repo(tmp_path: Path) -> Generator[Path, None, None]:
    """Create a temporary git repository.

    Initializes a git repo with user config and an initial commit.
    Changes cwd to the repo directory for the duration of the test.
    """
    subprocess.run(["git", "init"], cwd=tmp_path, check=True, capture_output=True)
    subprocess.run(
        ["git", "config", "user.email", "test@test.com"],
        cwd=tmp_path,
        check=True,
        capture_output=True,
    )
    subprocess.run(
        ["git", "config", "user.name", "Test User"],
        cwd=tmp_path,
        check=True,
        capture_output=True,
    )

    (tmp_path / "README.md").write_text("# Test\n")
    subprocess.run(["git", "add", "."], cwd=tmp_path, check=True, capture_output=True)
    subprocess.run(
        ["git", "commit", "-m", "Initial commit"],
        cwd=tmp_path,
        check=True,
        capture_output=True,
    )

    original_cwd = os.getcwd()
    os.chdir(tmp_path)
    try:
        yield tmp_path
    finally:
        os.chdir(original_cwd)


def write_file(root: Path, rel: str, content: str = "content\n") -> Path:
    """Write a file below root, creating parents."""
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


@pytest.fixture
def make_file() -> Callable[..., Path]:
    """Return a helper writing files below a root."""
    return write_file


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create a populated .ai workspace.

    Layout:
        .ai/memory/lessons.md, decisions.md
        .ai/docs/plans/a.md, plans/README.md, plans/x.template.md
        .ai/docs/tasks/sub/t.md
        .ai/templates/lessons.template.md, decisions.template.md
    """
    root = tmp_path / "project"
    root.mkdir()
    write_file(root, ".ai/memory/lessons.md", "learned things\n")
    write_file(root, ".ai/memory/decisions.md", "decided things\n")
    write_file(root, ".ai/docs/plans/a.md", "plan a\n")
    write_file(root, ".ai/docs/plans/README.md", "keep me\n")
    write_file(root, ".ai/docs/plans/x.template.md", "template\n")
    write_file(root, ".ai/docs/tasks/sub/t.md", "task\n")
    write_file(root, ".ai/templates/lessons.template.md", LESSONS_TEMPLATE)
    write_file(root, ".ai/templates/decisions.template.md", DECISIONS_TEMPLATE)
    (root / ".ai" / "reset.toml").write_text('[project]\nname = "demo"\n')
    return root


@pytest.fixture
def config() -> ResetConfig:
    """Configuration matching the workspace fixture."""
    cfg = ResetConfig()
    cfg.project.name = "demo"
    return cfg
