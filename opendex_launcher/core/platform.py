"""
Platform detection for the opendex launcher.

Release assets and CI artifacts of opendex-docker are named after Go's
GOOS/GOARCH values (e.g. 'launcher-linux-amd64.zip', artifact 'darwin-amd64'),
so this module normalizes the Python view of the platform to those names.

Usage:
    from opendex_launcher.core.platform import detect_platform

    platform_info = detect_platform()
    print(platform_info.platform_string())  # linux-amd64
"""

import functools
import platform
from dataclasses import dataclass


@dataclass(frozen=True)
class PlatformInfo:
    """
    Operating system and CPU architecture of the running launcher.

    Attributes:
        os: Operating system ('linux', 'darwin', 'windows', ...)
        arch: CPU architecture ('amd64', 'arm64', '386', 'arm', ...)
    """

    os: str
    arch: str

    @property
    def is_windows(self) -> bool:
        return self.os == "windows"

    def platform_string(self) -> str:
        """
        Get canonical platform string (e.g., 'linux-amd64').

        Example:
            >>> PlatformInfo('darwin', 'arm64').platform_string()
            'darwin-arm64'
        """
        return f"{self.os}-{self.arch}"

    def __str__(self) -> str:
        return self.platform_string()


@functools.lru_cache(maxsize=1)
def detect_platform() -> PlatformInfo:
    """
    Detect current platform information.

    This function is cached - it only runs detection once per process.
    """
    return PlatformInfo(os=_detect_os(), arch=_detect_architecture())


def _detect_os() -> str:
    """
    Detect operating system.

    Returns:
        GOOS-style name: 'linux', 'darwin', 'windows', or the lowercased
        platform.system() value for anything else
    """
    system = platform.system().lower()

    if system.startswith(("cygwin", "msys", "mingw")):
        return "windows"
    return system


def _detect_architecture() -> str:
    """
    Detect CPU architecture.

    Returns:
        GOARCH-style name: 'amd64', 'arm64', '386', 'arm'
    """
    machine = platform.machine().lower()

    if machine in ("x86_64", "amd64", "x64"):
        return "amd64"
    elif machine in ("aarch64", "arm64"):
        return "arm64"
    elif machine in ("i386", "i686", "x86"):
        return "386"
    elif machine.startswith("arm"):
        return "arm"
    else:
        # Return original for unknown architectures
        return machine


def clear_platform_cache():
    """Clear the platform detection cache."""
    detect_platform.cache_clear()


__all__ = [
    "PlatformInfo",
    "detect_platform",
    "clear_platform_cache",
]
