"""
Launch sequence: resolve, fetch if needed, and run the launcher binary.

Per invocation:
    ResolveCommit -> CacheCheck -> {CacheHit | Fetch -> Extract}
        -> SetEnv -> EnsureExecutable -> Exec -> ExitCode | LaunchError

There are no retries; the first failing step aborts the sequence with a
LaunchError naming that step. A child that runs and exits non-zero is reported
as its ExitCode, never as an error.
"""

import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Sequence, Union

from opendex_launcher.config.parser import LauncherConfig, load_config
from opendex_launcher.core.directory import (
    get_config_file,
    get_launcher_dir,
    get_versions_dir,
)
from opendex_launcher.core.download import DownloadProgress
from opendex_launcher.core.exceptions import (
    ExecError,
    FilesystemError,
    LauncherError,
    LaunchError,
)
from opendex_launcher.core.filesystem import ensure_directory, ensure_executable
from opendex_launcher.core.platform import PlatformInfo, detect_platform
from opendex_launcher.core.versions import VersionCache, VersionEntry
from opendex_launcher.github.client import GitHubClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExitCode:
    """Exit status of a launcher binary that actually ran."""

    code: int

    @property
    def success(self) -> bool:
        return self.code == 0


class Launcher:
    """
    Runs the opendex-docker launcher binary built for a branch.

    Example:
        >>> launcher = Launcher.create(get_home_dir())
        >>> result = launcher.start("master", "mainnet", home / "mainnet", ["status"])
        >>> sys.exit(result.code)
    """

    def __init__(
        self,
        home_dir: Path,
        config: Optional[LauncherConfig] = None,
        github: Optional[GitHubClient] = None,
        cache: Optional[VersionCache] = None,
        platform: Optional[PlatformInfo] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        """
        Initialize launcher.

        Args:
            home_dir: opendex-docker home directory
            config: Launcher configuration (empty if None)
            github: GitHub client (built from config if None)
            cache: Version cache (home_dir/launcher/versions if None)
            platform: Platform information (auto-detected if None)
            environ: Base environment for the child (os.environ if None)
        """
        self.home_dir = Path(home_dir)
        self.config = config or LauncherConfig()
        self.platform = platform or detect_platform()
        self.github = github or GitHubClient(
            access_token=self.config.github.access_token or None,
            platform=self.platform,
        )
        self.cache = cache or VersionCache(
            get_versions_dir(self.home_dir), platform=self.platform
        )
        self.environ = os.environ if environ is None else environ

    @classmethod
    def create(
        cls, home_dir: Union[str, Path], environ: Optional[Mapping[str, str]] = None
    ) -> "Launcher":
        """
        Set up a launcher for a home directory.

        Loads <home>/opendexd-docker.conf and creates <home>/launcher.

        Raises:
            ConfigError: If the configuration file is invalid
            FilesystemError: If the launcher directory cannot be created
        """
        home_dir = Path(home_dir)
        config = load_config(get_config_file(home_dir))
        ensure_directory(get_launcher_dir(home_dir))
        return cls(home_dir, config=config, environ=environ)

    def network_dir(self, network: str) -> Path:
        """Data directory of a network, honoring configured overrides."""
        return self.config.network_dir(network, self.home_dir)

    def start(
        self,
        branch: str,
        network: str,
        network_dir: Union[str, Path],
        args: Sequence[str] = (),
    ) -> ExitCode:
        """
        Resolve, fetch if needed, and run the launcher binary of a branch.

        Args:
            branch: Branch or release tag of opendex-docker
            network: Network name exported to the child as NETWORK
            network_dir: Data directory exported to the child as NETWORK_DIR
            args: Arguments passed through to the binary unchanged

        Returns:
            ExitCode of the binary

        Raises:
            LaunchError: If any step before or while starting the binary
                fails; `operation` names the step and `cause` holds the
                underlying LauncherError
        """
        try:
            commit = self.github.get_head_commit(branch)
        except LauncherError as e:
            raise LaunchError("git head commit", e) from e

        logger.debug(
            f"Start launcher with branch={branch}({commit}), "
            f"network={network}, networkDir={network_dir}"
        )

        entry = self._ensure_version(branch, commit)
        env = self.child_environment(network, network_dir)

        if not entry.binary.is_file():
            raise LaunchError(
                "run", ExecError(f"launcher binary not found: {entry.binary}")
            )

        if not self.platform.is_windows:
            try:
                ensure_executable(entry.binary)
            except FilesystemError as e:
                raise LaunchError("chmod", e) from e

        try:
            return self.run(entry, args, env)
        except ExecError as e:
            raise LaunchError("run", e) from e

    def _ensure_version(self, branch: str, commit: str) -> VersionEntry:
        """Return the cache entry of commit, downloading it on a miss."""
        try:
            self.cache.ensure_root()
        except FilesystemError as e:
            raise LaunchError("mkdir", e) from e

        entry = self.cache.resolve(commit)
        if entry.already_present:
            logger.debug(f"Using cached launcher {entry.directory}")
            return entry

        try:
            url = self.github.resolve_download_url(branch, commit)
            return self.cache.populate(
                entry,
                url,
                token=self.github.access_token,
                session=self.github.session,
                progress_callback=_log_progress,
            )
        except LauncherError as e:
            raise LaunchError("download latest binary", e) from e

    def child_environment(
        self, network: str, network_dir: Union[str, Path]
    ) -> dict:
        """Environment of the child: the base environment plus NETWORK and NETWORK_DIR."""
        env = dict(self.environ)
        env["NETWORK"] = network
        env["NETWORK_DIR"] = str(network_dir)
        return env

    def run(
        self, entry: VersionEntry, args: Sequence[str], env: Mapping[str, str]
    ) -> ExitCode:
        """
        Run the binary of an entry inside its directory.

        Standard input, output and error are inherited unmodified.

        Raises:
            ExecError: If the binary cannot be started
        """
        cmd = [str(entry.binary), *args]
        logger.debug(f"[run] {' '.join(cmd)}")

        try:
            completed = subprocess.run(cmd, cwd=entry.directory, env=dict(env))
        except OSError as e:
            raise ExecError(f"{entry.binary}: {e.strerror or e}") from e

        code = completed.returncode
        if code < 0:
            # Terminated by a signal; report it the way shells do
            code = 128 - code
        return ExitCode(code)


def _log_progress(progress: DownloadProgress) -> None:
    logger.debug(f"Downloading launcher.zip: {progress}")
