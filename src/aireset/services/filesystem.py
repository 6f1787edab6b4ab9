"""File I/O helpers shared by the archive engine and the orchestrator."""

import shutil
from collections.abc import Iterator
from pathlib import Path


def ensure_directory(path: Path) -> Path:
    """Create a directory (and parents) if missing."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def iter_files(root: Path) -> Iterator[Path]:
    """Yield regular files under root, sorted by POSIX relative path.

    A root that is itself a file yields just that file; a missing root
    yields nothing.
    """
    if root.is_file():
        yield root
        return
    if not root.is_dir():
        return
    files = [p for p in root.rglob("*") if p.is_file()]
    yield from sorted(files, key=lambda p: p.relative_to(root).as_posix())


def copy_file(source: Path, target: Path) -> int:
    """Copy one file byte for byte, creating parent directories.

    Returns:
        Number of bytes written to target
    """
    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source, target)
    shutil.copystat(source, target)
    return target.stat().st_size


def dir_is_nonempty(path: Path) -> bool:
    """True if path is a file, or a directory holding at least one file."""
    if path.is_file():
        return True
    return path.is_dir() and any(p.is_file() for p in path.rglob("*"))
