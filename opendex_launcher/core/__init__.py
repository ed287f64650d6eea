"""
Core functionality for the opendex launcher.

This package contains the foundational modules that other components depend on.
"""

from .directory import (
    get_home_dir,
    get_launcher_dir,
    get_versions_dir,
    get_config_file,
)

from .platform import (
    PlatformInfo,
    detect_platform,
    clear_platform_cache,
)

from .locking import (
    LockManager,
    LockTimeout,
)

from .versions import (
    VersionCache,
    VersionEntry,
)

from .exceptions import (
    LauncherError,
    NotFoundError,
    TransferError,
    DecodeError,
    FilesystemError,
    ArchiveExtractionError,
    InsecureArchiveError,
    ExecError,
    ConfigError,
    UnsupportedPlatformError,
    LaunchError,
)

__all__ = [
    "get_home_dir",
    "get_launcher_dir",
    "get_versions_dir",
    "get_config_file",
    "PlatformInfo",
    "detect_platform",
    "clear_platform_cache",
    "LockManager",
    "LockTimeout",
    "VersionCache",
    "VersionEntry",
    "LauncherError",
    "NotFoundError",
    "TransferError",
    "DecodeError",
    "FilesystemError",
    "ArchiveExtractionError",
    "InsecureArchiveError",
    "ExecError",
    "ConfigError",
    "UnsupportedPlatformError",
    "LaunchError",
]
