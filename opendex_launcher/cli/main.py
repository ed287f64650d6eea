"""
opendex-launcher command-line entry point.

The launcher takes no options of its own: every argument after the program
name is passed through to the launched binary. It is configured through the
environment instead:

    NETWORK             network to run (default: mainnet)
    BRANCH              opendex-docker branch or release tag (default: master)
    LAUNCHER_LOG_LEVEL  debug, info, warning or error (default: info)
"""

import logging
import os
import sys
from typing import List, Mapping, Optional

from opendex_launcher.core.directory import get_home_dir
from opendex_launcher.core.exceptions import LauncherError
from opendex_launcher.launcher.process import Launcher

logger = logging.getLogger(__name__)

DEFAULT_NETWORK = "mainnet"
DEFAULT_BRANCH = "master"
DEFAULT_LOG_LEVEL = "info"


class CLI:
    """opendex-launcher command-line interface."""

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        """
        Initialize CLI.

        Args:
            environ: Environment to read settings from (os.environ if None)
        """
        self.environ = os.environ if environ is None else environ

    @property
    def network(self) -> str:
        return self.environ.get("NETWORK", DEFAULT_NETWORK)

    @property
    def branch(self) -> str:
        return self.environ.get("BRANCH", DEFAULT_BRANCH)

    def run(self, argv: Optional[List[str]] = None) -> int:
        """
        Run the launcher.

        Args:
            argv: Full argument vector including the program name
                (uses sys.argv if None)

        Returns:
            Exit code: the launched binary's exit code, or 1 if the launcher
            itself failed
        """
        if argv is None:
            argv = sys.argv

        self._configure_logging()

        # Setup phase
        try:
            home_dir = get_home_dir()
            launcher = Launcher.create(home_dir, environ=self.environ)
        except LauncherError as e:
            logger.debug("Setup failed", exc_info=True)
            print(e)
            return 1

        network = self.network
        network_dir = launcher.network_dir(network)

        # Launch phase
        try:
            result = launcher.start(self.branch, network, network_dir, argv[1:])
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except LauncherError as e:
            logger.debug("Launch failed", exc_info=True)
            print(f"ERROR: {e}")
            return 1

        return result.code

    def _configure_logging(self):
        """Configure logging from LAUNCHER_LOG_LEVEL."""
        name = self.environ.get("LAUNCHER_LOG_LEVEL", DEFAULT_LOG_LEVEL)
        level = getattr(logging, name.upper(), None)
        if not isinstance(level, int):
            level = logging.INFO

        if level <= logging.DEBUG:
            format_str = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
        else:
            format_str = "%(levelname)s: %(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            stream=sys.stderr,
            force=True,  # Reconfigure if already configured
        )


def main():
    """Main entry point for CLI."""
    sys.exit(CLI().run())


if __name__ == "__main__":
    main()
