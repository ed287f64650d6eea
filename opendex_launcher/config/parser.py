"""
Configuration file parser.

The launcher shares opendexd-docker.conf (TOML) with the rest of
opendex-docker. Only the keys below are read; unknown keys are ignored.

    simnet-dir = "/data/simnet"
    testnet-dir = ""
    mainnet-dir = ""

    [GitHub]
    access-token = "abc123"
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import tomli

from opendex_launcher.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

NETWORKS = ("simnet", "testnet", "mainnet")


@dataclass
class GitHubConfig:
    """[GitHub] section."""

    access_token: str = ""


@dataclass
class LauncherConfig:
    """
    Launcher configuration.

    Attributes:
        github: GitHub credentials
        simnet_dir: Data directory override for simnet ("" = default)
        testnet_dir: Data directory override for testnet ("" = default)
        mainnet_dir: Data directory override for mainnet ("" = default)
    """

    github: GitHubConfig = field(default_factory=GitHubConfig)
    simnet_dir: str = ""
    testnet_dir: str = ""
    mainnet_dir: str = ""

    def network_dir(self, network: str, home_dir: Union[str, Path]) -> Path:
        """
        Data directory of a network.

        Returns the configured override when one is set, else home_dir/network.
        """
        override = getattr(self, f"{network}_dir", "") if network in NETWORKS else ""
        if override:
            return Path(override).expanduser()
        return Path(home_dir) / network


def _get_str(data: Dict[str, Any], key: str, section: str = "") -> str:
    value = data.get(key, "")
    if not isinstance(value, str):
        where = f"{section}.{key}" if section else key
        raise ConfigError(f"parse config: {where} must be a string")
    return value


def parse_config(text: str) -> LauncherConfig:
    """
    Parse configuration from TOML text.

    Raises:
        ConfigError: If the text is not valid TOML or a value has the wrong type

    Example:
        >>> config = parse_config('[GitHub]\\naccess-token = "abc123"\\n')
        >>> config.github.access_token
        'abc123'
    """
    try:
        data = tomli.loads(text)
    except tomli.TOMLDecodeError as e:
        raise ConfigError(f"parse config: {e}") from e

    github_data = data.get("GitHub", data.get("github", {}))
    if not isinstance(github_data, dict):
        raise ConfigError("parse config: GitHub must be a table")

    return LauncherConfig(
        github=GitHubConfig(
            access_token=_get_str(github_data, "access-token", "GitHub"),
        ),
        simnet_dir=_get_str(data, "simnet-dir"),
        testnet_dir=_get_str(data, "testnet-dir"),
        mainnet_dir=_get_str(data, "mainnet-dir"),
    )


def load_config(config_file: Optional[Union[str, Path]]) -> LauncherConfig:
    """
    Load configuration from a file.

    A missing file yields the default (empty) configuration.

    Raises:
        ConfigError: If the file cannot be read or parsed
    """
    if config_file is None:
        return LauncherConfig()

    config_file = Path(config_file)
    if not config_file.exists():
        logger.debug(f"Config file not found (optional): {config_file}")
        return LauncherConfig()

    logger.debug(f"Loading configuration from {config_file}")

    try:
        text = config_file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"read config {config_file}: {e}") from e

    return parse_config(text)
