"""
File system utilities for the opendex launcher.

This module provides:
- Zip archive extraction preserving directory structure and file modes
- Executable-bit management for extracted binaries
- Path utilities used by the version cache
"""

import logging
import os
import shutil
import stat
import zipfile
from pathlib import Path
from typing import Callable, List, Optional, Union

from opendex_launcher.core.exceptions import (
    ArchiveExtractionError,
    FilesystemError,
    InsecureArchiveError,
)

logger = logging.getLogger(__name__)

# Platform detection
IS_WINDOWS = os.name == "nt"

DEFAULT_FILE_MODE = 0o644


# ============================================================================
# Path Utilities
# ============================================================================


def is_relative_to(path: Path, parent: Path) -> bool:
    """
    Check if path is relative to (under) parent directory.

    Example:
        >>> is_relative_to(Path("/home/user/project/file.txt"), Path("/home/user"))
        True
    """
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


def ensure_directory(path: Union[str, Path], mode: int = 0o755) -> Path:
    """
    Ensure a directory exists (idempotent).

    Args:
        path: Directory path
        mode: Permission bits for newly created directories

    Returns:
        Path object

    Raises:
        FilesystemError: If the directory cannot be created
    """
    path = Path(path)
    try:
        path.mkdir(mode=mode, parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemError(f"mkdir {path}: {e}") from e
    return path


# ============================================================================
# Archive Extraction
# ============================================================================


def _validate_archive_path(path: str, destination: Path) -> None:
    """
    Validate that an archive member path stays inside the destination.

    Raises:
        InsecureArchiveError: If path attempts directory traversal
    """
    member_path = (destination / path).resolve()

    if not is_relative_to(member_path, destination.resolve()):
        raise InsecureArchiveError(
            f"Archive member '{path}' attempts directory traversal. "
            "This is a security risk and extraction has been blocked."
        )


def _member_mode(info: zipfile.ZipInfo) -> int:
    """Permission bits stored in a zip entry (Unix creators only)."""
    mode = stat.S_IMODE(info.external_attr >> 16)
    return mode or DEFAULT_FILE_MODE


def extract_archive(
    archive_path: Union[str, Path],
    destination: Union[str, Path],
    progress_callback: Optional[Callable[[int, int], None]] = None,
) -> List[str]:
    """
    Extract a zip archive into a destination directory.

    Entries are processed one at a time in archive order. Directory entries
    are created; file entries are written to destination/name (truncating an
    existing file) and then given the entry's permission bits. Only one output
    file is open at any time, so duplicate entry names simply overwrite each
    other in order.

    Args:
        archive_path: Path to the .zip archive
        destination: Directory to extract to (created if missing)
        progress_callback: Optional callback(current, total) for progress

    Returns:
        Names of the extracted entries, in archive order

    Raises:
        ArchiveExtractionError: If the archive is missing, corrupt, or an
            entry cannot be written
        InsecureArchiveError: If an entry would land outside destination

    Example:
        >>> extract_archive('versions/abc123/launcher.zip', 'versions/abc123')
        ['launcher']
    """
    archive_path = Path(archive_path)
    destination = Path(destination)

    if not archive_path.exists():
        raise ArchiveExtractionError(f"Archive not found: {archive_path}")

    destination.mkdir(parents=True, exist_ok=True)

    try:
        with zipfile.ZipFile(archive_path, "r") as zf:
            members = zf.infolist()
            total = len(members)

            for member in members:
                _validate_archive_path(member.filename, destination)

            for i, member in enumerate(members):
                _extract_member(zf, member, destination)
                if progress_callback:
                    progress_callback(i + 1, total)

            return [member.filename for member in members]
    except InsecureArchiveError:
        raise
    except (zipfile.BadZipFile, OSError) as e:
        raise ArchiveExtractionError(f"Failed to extract {archive_path}: {e}") from e


def _extract_member(
    zf: zipfile.ZipFile, member: zipfile.ZipInfo, destination: Path
) -> None:
    """Extract a single zip entry."""
    logger.debug(f"Extracting {member.filename}")

    target = destination / member.filename

    if member.is_dir():
        target.mkdir(parents=True, exist_ok=True)
        return

    target.parent.mkdir(parents=True, exist_ok=True)

    with zf.open(member) as src, open(target, "wb") as dst:
        shutil.copyfileobj(src, dst)

    if not IS_WINDOWS:
        os.chmod(target, _member_mode(member))


# ============================================================================
# Executables
# ============================================================================


def is_executable(path: Union[str, Path]) -> bool:
    """Check whether the owner-execute bit is set on path."""
    return bool(Path(path).stat().st_mode & stat.S_IXUSR)


def ensure_executable(path: Union[str, Path]) -> bool:
    """
    Make sure a binary carries the owner-execute permission bit.

    Archives do not reliably preserve exec bits, so the bit is added when it
    is missing (along with group/other execute where they can read).
    This is a no-op on Windows.

    Args:
        path: Path to the binary

    Returns:
        True if permissions were changed, False otherwise

    Raises:
        FilesystemError: If the file cannot be inspected or chmod fails
    """
    if IS_WINDOWS:
        return False

    path = Path(path)
    try:
        if is_executable(path):
            return False

        mode = stat.S_IMODE(path.stat().st_mode)
        # Mirror each read bit onto the matching execute bit
        new_mode = mode | stat.S_IXUSR | ((mode & 0o044) >> 2)
        os.chmod(path, new_mode)
    except OSError as e:
        raise FilesystemError(f"chmod {path}: {e}") from e

    logger.debug(f"Made {path} executable ({oct(mode)} -> {oct(new_mode)})")
    return True


__all__ = [
    "IS_WINDOWS",
    "is_relative_to",
    "ensure_directory",
    "extract_archive",
    "is_executable",
    "ensure_executable",
]
