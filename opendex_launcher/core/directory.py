"""
Directory layout of the opendex launcher.

Directory Structure:
    Home (per operating system):
        - Linux:   ~/.opendex-docker/
        - macOS:   ~/Library/Application Support/OpendexDocker/
        - Windows: ~/AppData/Local/OpendexDocker/

    Inside the home directory:
        - opendexd-docker.conf  : TOML configuration (access token, network dirs)
        - launcher/             : Launcher state, created lazily
          - versions/<commit>/  : Extracted launcher binaries, one per commit
          - lock/               : Per-commit lock files
        - <network>/            : Default data directory of each network
"""

from pathlib import Path
from typing import Optional

from opendex_launcher.core.exceptions import UnsupportedPlatformError
from opendex_launcher.core.platform import PlatformInfo, detect_platform

CONFIG_FILE_NAME = "opendexd-docker.conf"


def get_home_dir(platform: Optional[PlatformInfo] = None) -> Path:
    """
    Get the platform-specific opendex-docker home directory.

    Args:
        platform: Platform to resolve for (auto-detected if None)

    Returns:
        Path to the home directory (not created)

    Raises:
        UnsupportedPlatformError: If the operating system has no known layout,
            or the user's home directory cannot be determined

    Example:
        >>> get_home_dir()
        PosixPath('/home/user/.opendex-docker')  # on Linux
    """
    platform = platform or detect_platform()
    try:
        user_home = Path.home()
    except (RuntimeError, KeyError) as e:
        raise UnsupportedPlatformError(f"home directory: {e}") from e

    if platform.os == "linux":
        return user_home / ".opendex-docker"
    elif platform.os == "darwin":
        return user_home / "Library" / "Application Support" / "OpendexDocker"
    elif platform.os == "windows":
        return user_home / "AppData" / "Local" / "OpendexDocker"
    else:
        raise UnsupportedPlatformError(f"unsupported platform: {platform.os}")


def get_launcher_dir(home_dir: Path) -> Path:
    return Path(home_dir) / "launcher"


def get_versions_dir(home_dir: Path) -> Path:
    return get_launcher_dir(home_dir) / "versions"


def get_config_file(home_dir: Path) -> Path:
    return Path(home_dir) / CONFIG_FILE_NAME


__all__ = [
    "CONFIG_FILE_NAME",
    "get_home_dir",
    "get_launcher_dir",
    "get_versions_dir",
    "get_config_file",
]
