"""
Version cache of downloaded launcher binaries.

Each resolved commit (a git hash or a release tag) owns one directory under
<home>/launcher/versions/. The directory holds the downloaded launcher.zip,
and everything extracted from it. An entry counts as present when its binary
exists, so directories written by earlier launchers are reused as they are.

While an entry is being populated it carries an in-progress marker, created
before the download and removed once extraction succeeded. An entry whose
marker is still there was interrupted and is fetched again on the next start.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import requests

from opendex_launcher.core.download import DownloadProgress, download_file
from opendex_launcher.core.exceptions import FilesystemError
from opendex_launcher.core.filesystem import ensure_directory, extract_archive
from opendex_launcher.core.locking import LockManager
from opendex_launcher.core.platform import PlatformInfo, detect_platform

logger = logging.getLogger(__name__)

ARCHIVE_NAME = "launcher.zip"
INCOMPLETE_MARKER = ".launcher-incomplete"


@dataclass
class VersionEntry:
    """Cache entry of one commit."""

    commit: str
    """Commit hash or release tag the entry is keyed by"""

    directory: Path
    """versions/<commit> directory"""

    binary: Path
    """Expected launcher binary inside the directory"""

    already_present: bool
    """Whether the binary exists and can be run without downloading"""

    @property
    def marker(self) -> Path:
        return self.directory / INCOMPLETE_MARKER

    @property
    def archive(self) -> Path:
        return self.directory / ARCHIVE_NAME


class VersionCache:
    """
    Maps commits to extracted launcher directories.

    Example:
        >>> cache = VersionCache(home / "launcher" / "versions")
        >>> cache.ensure_root()
        >>> entry = cache.resolve("21.02.02")
        >>> if not entry.already_present:
        ...     entry = cache.populate(entry, url, token=token)
        >>> entry.binary
        PosixPath('/home/user/.opendex-docker/launcher/versions/21.02.02/launcher')
    """

    def __init__(
        self,
        versions_dir: Path,
        platform: Optional[PlatformInfo] = None,
        lock_manager: Optional[LockManager] = None,
    ):
        """
        Initialize version cache.

        Args:
            versions_dir: Root of the cache (<launcher>/versions)
            platform: Platform information (auto-detected if None)
            lock_manager: Lock manager for cache population. If None, lock
                files live in <launcher>/lock.
        """
        self.versions_dir = Path(versions_dir)
        self.launcher_dir = self.versions_dir.parent
        self.platform = platform or detect_platform()
        self.lock_manager = lock_manager or LockManager(self.launcher_dir / "lock")

    @property
    def binary_name(self) -> str:
        return "launcher.exe" if self.platform.is_windows else "launcher"

    def ensure_root(self) -> Path:
        """
        Create the launcher and versions directories if absent (idempotent).

        Raises:
            FilesystemError: If a directory cannot be created
        """
        ensure_directory(self.launcher_dir)
        return ensure_directory(self.versions_dir)

    def resolve(self, commit: str) -> VersionEntry:
        """
        Look up the cache entry for a commit.

        No files are created and no network access happens here.
        """
        if not commit:
            raise ValueError("Commit cannot be empty")

        directory = self.versions_dir / commit
        binary = directory / self.binary_name
        return VersionEntry(
            commit=commit,
            directory=directory,
            binary=binary,
            already_present=self._is_present(directory, binary),
        )

    def _is_present(self, directory: Path, binary: Path) -> bool:
        return binary.is_file() and not (directory / INCOMPLETE_MARKER).exists()

    def populate(
        self,
        entry: VersionEntry,
        url: str,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        progress_callback: Optional[Callable[[DownloadProgress], None]] = None,
    ) -> VersionEntry:
        """
        Download and extract the launcher archive for an entry.

        The archive is saved as <commit>/launcher.zip and extracted in place.
        The in-progress marker exists from before the download until the
        extracted binary has been found. Nothing is downloaded when the entry
        is already present, including when another process populated it while
        this one waited for the lock.

        Args:
            entry: Entry returned by resolve()
            url: Release asset or CI artifact URL
            token: Access token for the download
            session: requests session to use
            progress_callback: Optional download progress callback

        Returns:
            The refreshed entry (already_present is True on success)

        Raises:
            TransferError: If the download fails
            ArchiveExtractionError: If the archive cannot be extracted
            FilesystemError: If the commit directory cannot be prepared, or
                the extracted archive does not contain the binary
        """
        if entry.already_present:
            logger.debug(f"Launcher {entry.commit} already cached at {entry.directory}")
            return entry

        with self.lock_manager.commit_lock(entry.commit):
            entry = self.resolve(entry.commit)
            if entry.already_present:
                logger.info(f"Another process completed download: {entry.directory}")
                return entry

            ensure_directory(entry.directory)
            try:
                entry.marker.touch()
            except OSError as e:
                raise FilesystemError(f"write {entry.marker}: {e}") from e

            start = time.time()
            download_file(
                url,
                entry.archive,
                token=token,
                session=session,
                progress_callback=progress_callback,
            )
            download_time = time.time() - start

            start = time.time()
            extract_archive(entry.archive, entry.directory)
            extraction_time = time.time() - start

            if not entry.binary.is_file():
                raise FilesystemError(
                    f"{ARCHIVE_NAME} for {entry.commit} does not contain {self.binary_name}"
                )

            try:
                entry.marker.unlink()
            except OSError as e:
                raise FilesystemError(f"remove {entry.marker}: {e}") from e

        logger.debug(
            f"Cached launcher {entry.commit} "
            f"(download {download_time:.1f}s, extraction {extraction_time:.1f}s)"
        )
        return self.resolve(entry.commit)

