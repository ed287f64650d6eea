"""Reusable archive builders for testing.

Builds zip archives shaped like the launcher.zip files published by
opendex-docker releases and CI runs, with explicit Unix permission bits.
"""

import io
import stat
import zipfile
from pathlib import Path
from typing import Iterable, Optional, Tuple, Union

import pytest

# (name, content, mode); content None marks a directory entry
ZipEntry = Tuple[str, Optional[Union[str, bytes]], int]

LAUNCHER_SCRIPT = "#!/bin/sh\necho launched\nexit 0\n"


def build_zip(entries: Iterable[ZipEntry], path: Optional[Path] = None) -> bytes:
    """
    Build a zip archive from entries.

    Args:
        entries: (name, content, mode) tuples in archive order
        path: If given, the archive is also written there

    Returns:
        The archive bytes

    Example:
        >>> data = build_zip([("bin/", None, 0o755), ("bin/launcher", "x", 0o755)])
    """
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        for name, content, mode in entries:
            info = zipfile.ZipInfo(name)
            info.create_system = 3  # Unix, so external_attr carries the mode
            if content is None:
                info.external_attr = ((stat.S_IFDIR | mode) << 16) | 0x10
                zf.writestr(info, b"")
            else:
                info.external_attr = (stat.S_IFREG | mode) << 16
                info.compress_type = zipfile.ZIP_DEFLATED
                zf.writestr(info, content)

    data = buffer.getvalue()
    if path is not None:
        Path(path).write_bytes(data)
    return data


@pytest.fixture
def launcher_zip() -> bytes:
    """
    Archive of a working launcher build.

    Contains:
    - launcher (shell script, 0o755)
    - README.md (0o644)
    """
    return build_zip(
        [
            ("launcher", LAUNCHER_SCRIPT, 0o755),
            ("README.md", "# opendex launcher\n", 0o644),
        ]
    )


@pytest.fixture
def launcher_zip_without_exec_bit() -> bytes:
    """Archive whose launcher lost its execute bits (e.g. built on Windows)."""
    return build_zip([("launcher", LAUNCHER_SCRIPT, 0o644)])
