"""Lock manager for workspace concurrency control.

Provides PID-based file locking so only one reset, restore or archive
housekeeping command runs against a workspace at a time. Includes stale
lock detection for crash recovery.

Uses atomic file creation (O_CREAT | O_EXCL) to prevent TOCTOU races.
"""

import contextlib
import logging
import os
from collections.abc import Iterator
from datetime import datetime, timedelta
from pathlib import Path

from pydantic import ValidationError

from ..constants import LOCK_FILE
from ..errors import LockError
from ..models import Lock

logger = logging.getLogger(__name__)

STALE_TIMEOUT_SECONDS = 3600  # 1 hour
MAX_LOCK_RETRIES = 3  # Max retries when clearing stale locks


def _lock_path(ai_dir: Path) -> Path:
    """Get path to lock file."""
    return ai_dir / LOCK_FILE


def _is_pid_running(pid: int) -> bool:
    """Check if a process with given PID is running."""
    try:
        os.kill(pid, 0)  # Signal 0 doesn't kill, just checks
        return True
    except OSError:
        return False


def get_current_lock(ai_dir: Path) -> Lock | None:
    """Get current lock if it exists and is readable.

    Args:
        ai_dir: Path to .ai directory

    Returns:
        Lock if a valid lock file exists, None otherwise
    """
    lock_path = _lock_path(ai_dir)
    if not lock_path.exists():
        return None

    try:
        return Lock.model_validate_json(lock_path.read_text())
    except (OSError, ValidationError) as e:
        logger.debug("Ignoring unreadable lock file %s: %s", lock_path, e)
        return None


def is_stale_lock(lock: Lock, timeout_seconds: int = STALE_TIMEOUT_SECONDS) -> bool:
    """Check if lock is stale (PID dead or held too long).

    Args:
        lock: Lock to check
        timeout_seconds: Max lock age before it is considered stale

    Returns:
        True if lock is stale and should be cleared
    """
    if not _is_pid_running(lock.pid):
        return True

    age = datetime.now() - lock.started_at
    return age > timedelta(seconds=timeout_seconds)


def _try_atomic_create(lock_path: Path, lock: Lock) -> bool:
    """Attempt atomic lock file creation.

    Returns:
        True if lock was created, False if file already exists
    """
    try:
        fd = os.open(str(lock_path), os.O_CREAT | os.O_EXCL | os.O_WRONLY)
        try:
            os.write(fd, lock.model_dump_json(indent=2).encode())
        finally:
            os.close(fd)
        return True
    except FileExistsError:
        return False


def acquire_lock(ai_dir: Path, command: str) -> Lock:
    """Acquire the workspace lock.

    Args:
        ai_dir: Path to .ai directory
        command: Command acquiring the lock

    Returns:
        Lock object if acquired

    Raises:
        LockError: If another process holds an active lock
    """
    lock_path = _lock_path(ai_dir)
    lock = Lock(pid=os.getpid(), command=command)

    for _ in range(MAX_LOCK_RETRIES):
        if _try_atomic_create(lock_path, lock):
            return lock

        existing = get_current_lock(ai_dir)
        if existing is None:
            # Corrupted lock file; clear it and retry
            with contextlib.suppress(FileNotFoundError):
                lock_path.unlink()
            continue

        if existing.pid == os.getpid():
            lock_path.write_text(lock.model_dump_json(indent=2))
            return lock

        if is_stale_lock(existing):
            logger.warning(
                "Clearing stale lock (PID %d, command: %s)", existing.pid, existing.command
            )
            with contextlib.suppress(FileNotFoundError):
                lock_path.unlink()
            continue

        raise LockError(
            f"Another operation is in progress (PID {existing.pid}, command: {existing.command})",
            operation="acquire_lock",
            suggestions=[
                "Wait for the other command to finish",
                f"Delete {lock_path} if that process no longer exists",
            ],
        )

    raise LockError("Failed to acquire lock after multiple attempts", operation="acquire_lock")


def release_lock(ai_dir: Path) -> None:
    """Release lock if owned by current process.

    Args:
        ai_dir: Path to .ai directory
    """
    lock_path = _lock_path(ai_dir)
    existing = get_current_lock(ai_dir)

    if existing and existing.pid == os.getpid():
        lock_path.unlink(missing_ok=True)


@contextlib.contextmanager
def workspace_lock(ai_dir: Path, command: str) -> Iterator[Lock]:
    """Hold the workspace lock for the duration of a with block."""
    lock = acquire_lock(ai_dir, command)
    try:
        yield lock
    finally:
        release_lock(ai_dir)
