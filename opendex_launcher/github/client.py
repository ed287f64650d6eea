"""
GitHub client locating launcher builds of opendex-docker.

Launcher binaries come from two places:
- Release tags (e.g. '21.02.02') publish a release asset per platform:
  https://github.com/<repo>/releases/download/<tag>/launcher-<os>-<arch>.zip
- Every other branch relies on the latest run of the 'build.yml' workflow,
  which uploads one artifact per platform named '<os>-amd64'.

The latest build of a branch is only used when it was built from the branch's
current head commit; an older build is never substituted.
"""

import logging
import re
from typing import Any, Optional

import requests
from requests.exceptions import RequestException

from opendex_launcher.core.download import auth_headers
from opendex_launcher.core.exceptions import DecodeError, NotFoundError, TransferError
from opendex_launcher.core.platform import PlatformInfo, detect_platform
from opendex_launcher.github.models import (
    ApiErrorBody,
    ArtifactList,
    Commit,
    WorkflowRun,
    WorkflowRunList,
)

logger = logging.getLogger(__name__)

GITHUB_REPO = "opendexnetwork/opendex-docker"
GITHUB_API_URL = "https://api.github.com"
GITHUB_URL = "https://github.com"
BUILD_WORKFLOW = "build.yml"
API_ACCEPT = "application/vnd.github.v3+json"

RELEASE_REF = re.compile(r"^\d{2}\.\d{2}\.\d{2}.*$")


def is_release_ref(branch: str) -> bool:
    """
    Check whether a branch name is a release tag.

    Example:
        >>> is_release_ref("21.02.02")
        True
        >>> is_release_ref("master")
        False
    """
    return RELEASE_REF.match(branch) is not None


class GitHubClient:
    """
    Resolves branches to commits and commits to launcher download URLs.

    Example:
        >>> client = GitHubClient(access_token="abc123")
        >>> commit = client.get_head_commit("master")
        >>> url = client.resolve_download_url("master", commit)
    """

    def __init__(
        self,
        access_token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        platform: Optional[PlatformInfo] = None,
        repo: str = GITHUB_REPO,
    ):
        """
        Initialize GitHub client.

        Args:
            access_token: Token sent as a bearer Authorization header
                (required to download CI artifacts)
            session: requests session to use (a new one is created if None)
            platform: Platform information (auto-detected if None)
            repo: Repository in 'owner/name' form
        """
        self.access_token = access_token
        self.session = session or requests.Session()
        self.platform = platform or detect_platform()
        self.repo = repo

    @property
    def artifact_name(self) -> str:
        """Name of the CI artifact built for this operating system."""
        return f"{self.platform.os}-amd64"

    def _get(self, path: str, params: Optional[dict] = None) -> Any:
        """
        GET an API path and decode its JSON body.

        Raises:
            TransferError: On transport failures and non-2xx responses; the
                message is the API's error message
            DecodeError: If a body is not valid JSON
        """
        url = f"{GITHUB_API_URL}/repos/{self.repo}/{path}"
        headers = {"Accept": API_ACCEPT}
        headers.update(auth_headers(self.access_token))

        logger.debug(f"GET {url} {params or ''}".rstrip())
        try:
            response = self.session.get(url, headers=headers, params=params)
        except RequestException as e:
            raise TransferError(f"request {url}: {e}") from e

        with response:
            if not response.ok:
                body = ApiErrorBody.from_response(response)
                raise TransferError(body.message, status_code=body.status_code)
            try:
                return response.json()
            except ValueError as e:
                raise DecodeError(f"decode {url}: {e}") from e

    def get_head_commit(self, branch: str) -> str:
        """
        Get the latest commit of a branch (or the commit a tag points to).

        Raises:
            NotFoundError: If the branch does not exist or the API answers
                with any non-2xx status
            TransferError: If the request itself fails (no HTTP response)
            DecodeError: If the response has no commit sha, or an error
                response is not JSON
        """
        try:
            data = self._get(f"commits/{branch}")
        except TransferError as e:
            if e.status_code is not None:
                raise NotFoundError(f"branch {branch}: {e}") from e
            raise
        return Commit.from_dict(data).sha

    def get_last_run_of_branch(self, branch: str, commit: str) -> WorkflowRun:
        """
        Get the most recent build workflow run of a branch.

        Raises:
            NotFoundError: If the branch has no runs, or its latest run did
                not build `commit`
        """
        data = self._get(
            f"actions/workflows/{BUILD_WORKFLOW}/runs", params={"branch": branch}
        )
        runs = WorkflowRunList.from_dict(data).workflow_runs
        if not runs:
            raise NotFoundError(f"no {BUILD_WORKFLOW} runs for branch {branch}")

        run = runs[0]
        if run.head_sha != commit:
            raise NotFoundError(
                f"latest {BUILD_WORKFLOW} run {run.id} of branch {branch} "
                f"built {run.head_sha}, not {commit}"
            )
        return run

    def get_artifact_download_url(self, run_id: int) -> str:
        """
        Get the download URL of this platform's artifact of a run.

        Raises:
            NotFoundError: If the run has no artifact named '<os>-amd64'
        """
        data = self._get(f"actions/runs/{run_id}/artifacts")
        artifact = ArtifactList.from_dict(data).find(self.artifact_name)
        if artifact is None:
            raise NotFoundError(f"no {self.artifact_name} artifact in run {run_id}")
        return artifact.archive_download_url

    def release_download_url(self, tag: str) -> str:
        """Release asset URL of a tag for this platform (no network call)."""
        return (
            f"{GITHUB_URL}/{self.repo}/releases/download/{tag}/"
            f"launcher-{self.platform.os}-{self.platform.arch}.zip"
        )

    def resolve_download_url(self, branch: str, commit: str) -> str:
        """
        Find where the launcher archive for a branch at a commit lives.

        Release tags map straight to their release asset URL. Other branches
        need a successful build of exactly `commit`.

        Raises:
            NotFoundError: If the branch does not have a launcher build for
                `commit`, or the build has no artifact for this platform
            TransferError: If an API call fails
            DecodeError: If an API response is malformed
        """
        if is_release_ref(branch):
            url = self.release_download_url(branch)
            logger.debug(f"Release {branch} resolves to {url}")
            return url

        try:
            run = self.get_last_run_of_branch(branch, commit)
        except NotFoundError as e:
            raise NotFoundError(
                f"no launcher build for commit {commit} "
                f'(The branch "{branch}" does not have a binary launcher)'
            ) from e

        url = self.get_artifact_download_url(run.id)
        logger.debug(f"Download launcher.zip from {url}")
        return url
