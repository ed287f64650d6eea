"""
Cross-process locking for the version cache.

Two launchers started at the same time for the same commit would otherwise
download and extract into the same directory concurrently. The commit lock
serializes cache population; the second process waits and then finds the
entry already complete.

Usage:
    from opendex_launcher.core.locking import LockManager

    lock_manager = LockManager(launcher_dir / "lock")
    with lock_manager.commit_lock(commit):
        # Safely populate versions/<commit>
        pass
"""

import logging
from contextlib import contextmanager
from pathlib import Path

from filelock import FileLock, Timeout as LockTimeout

from opendex_launcher.core.exceptions import FilesystemError

logger = logging.getLogger(__name__)


class LockManager:
    """
    Manages file locks for launcher resources.

    Uses file-based locking with the `filelock` library for cross-platform
    compatibility and automatic cleanup on process death.

    Attributes:
        lock_dir: Directory where lock files are stored
    """

    def __init__(self, lock_dir: Path):
        self.lock_dir = Path(lock_dir)

    def lock_path(self, commit: str) -> Path:
        """Lock file used for a commit."""
        # Sanitize commit to create valid filename
        safe_id = commit.replace("/", "-").replace("\\", "-").replace(":", "-")
        return self.lock_dir / f"commit-{safe_id}.lock"

    @contextmanager
    def commit_lock(self, commit: str, timeout: float = 300):
        """
        Acquire the lock for populating a commit directory.

        Args:
            commit: Commit identifier (hash or release tag)
            timeout: Maximum wait time in seconds (default: 300 for long
                downloads, -1 waits forever)

        Yields:
            None

        Raises:
            FilesystemError: If the lock directory cannot be created or the
                lock can't be acquired within timeout
        """
        try:
            self.lock_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemError(f"mkdir {self.lock_dir}: {e}") from e

        lock_path = self.lock_path(commit)
        lock = FileLock(lock_path, timeout=timeout)

        try:
            with lock:
                logger.debug(f"Acquired commit lock: {lock_path}")
                yield
                logger.debug(f"Released commit lock: {lock_path}")
        except LockTimeout as e:
            raise FilesystemError(
                f"Could not acquire lock for commit {commit} after {timeout}s. "
                "Another launcher may be downloading this version."
            ) from e


__all__ = [
    "LockManager",
    "LockTimeout",
]
