"""
Centralized exception hierarchy for the opendex launcher.

Every failure raised by the launcher derives from LauncherError so the CLI can
report it uniformly. A child process that runs and exits non-zero is not an
error; see opendex_launcher.launcher.process.ExitCode.
"""

from typing import Optional


# ============================================================================
# Base Exceptions
# ============================================================================


class LauncherError(Exception):
    """Base exception for all launcher errors."""

    pass


# ============================================================================
# Remote Exceptions
# ============================================================================


class NotFoundError(LauncherError):
    """No matching branch, workflow run or artifact exists."""

    pass


class TransferError(LauncherError):
    """Raised when an HTTP request fails or returns a non-2xx status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class DecodeError(LauncherError):
    """Raised when a remote response does not have the expected structure."""

    pass


# ============================================================================
# Local Exceptions
# ============================================================================


class FilesystemError(LauncherError):
    """Base exception for filesystem operations."""

    pass


class ArchiveExtractionError(FilesystemError):
    """Failed to extract an archive."""

    pass


class InsecureArchiveError(ArchiveExtractionError):
    """Archive contains insecure paths (directory traversal attempt)."""

    pass


class ExecError(LauncherError):
    """The launcher binary is missing or cannot be executed."""

    pass


class ConfigError(LauncherError):
    """Configuration file cannot be read or parsed."""

    pass


class UnsupportedPlatformError(LauncherError):
    """Raised when the current operating system is not supported."""

    pass


# ============================================================================
# Launch Sequence
# ============================================================================


class LaunchError(LauncherError):
    """
    A step of the launch sequence failed.

    Attributes:
        operation: Name of the step that failed (e.g. 'git head commit')
        cause: The underlying exception
    """

    def __init__(self, operation: str, cause: BaseException):
        self.operation = operation
        self.cause = cause
        super().__init__(f"{operation}: {cause}")
