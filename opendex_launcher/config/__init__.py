"""
Launcher configuration (opendexd-docker.conf).
"""

from .parser import GitHubConfig, LauncherConfig, load_config, parse_config

__all__ = ["GitHubConfig", "LauncherConfig", "load_config", "parse_config"]
