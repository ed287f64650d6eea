"""
Unit tests for the GitHub client.

All API traffic is mocked with `responses`.
"""

import pytest
import requests
import responses
from responses import matchers

from opendex_launcher.core.exceptions import DecodeError, NotFoundError, TransferError
from opendex_launcher.core.platform import PlatformInfo
from opendex_launcher.github.client import (
    API_ACCEPT,
    GitHubClient,
    is_release_ref,
)

API = "https://api.github.com/repos/opendexnetwork/opendex-docker"
RUNS_URL = f"{API}/actions/workflows/build.yml/runs"
HEAD = "3c1d1e8f0f0e4b5ea1c9e3f9a2e1d0c2b7a6f5e4"


def _run(run_id: int, head_sha: str, branch: str = "master") -> dict:
    return {
        "id": run_id,
        "created_at": "2021-02-03T10:00:00Z",
        "head_branch": branch,
        "head_sha": head_sha,
    }


def _artifacts(*names: str) -> dict:
    return {
        "total_count": len(names),
        "artifacts": [
            {
                "name": name,
                "size_in_bytes": 1024,
                "archive_download_url": f"{API}/actions/artifacts/{i}/zip",
            }
            for i, name in enumerate(names, start=1)
        ],
    }


@pytest.fixture
def client(linux_platform):
    return GitHubClient(access_token="abc123", platform=linux_platform)


class TestIsReleaseRef:
    """Tests for release tag detection."""

    @pytest.mark.parametrize("branch", ["21.02.02", "20.12.01-rc1", "99.99.99x"])
    def test_release(self, branch):
        assert is_release_ref(branch)

    @pytest.mark.parametrize(
        "branch", ["master", "v21.02.02", "1.2.3", "21.02", "feat/21.02.02", ""]
    )
    def test_not_release(self, branch):
        assert not is_release_ref(branch)


class TestGetHeadCommit:
    """Tests for GitHubClient.get_head_commit."""

    @responses.activate
    def test_returns_sha(self, client):
        """Test the branch's head sha is returned."""
        responses.add(responses.GET, f"{API}/commits/master", json={"sha": HEAD})

        assert client.get_head_commit("master") == HEAD

    @responses.activate
    def test_request_headers(self, client):
        """Test API requests carry the Accept and bearer headers."""
        responses.add(responses.GET, f"{API}/commits/master", json={"sha": HEAD})

        client.get_head_commit("master")

        headers = responses.calls[0].request.headers
        assert headers["Accept"] == API_ACCEPT
        assert headers["Authorization"] == "Bearer abc123"

    @responses.activate
    def test_anonymous_request(self, linux_platform):
        """Test no Authorization header is sent without a token."""
        responses.add(responses.GET, f"{API}/commits/master", json={"sha": HEAD})

        GitHubClient(platform=linux_platform).get_head_commit("master")

        assert "Authorization" not in responses.calls[0].request.headers

    @responses.activate
    def test_unknown_branch(self, client):
        """Test a 404 becomes NotFoundError."""
        responses.add(
            responses.GET,
            f"{API}/commits/nope",
            json={"message": "Not Found"},
            status=404,
        )

        with pytest.raises(NotFoundError, match="branch nope: Not Found"):
            client.get_head_commit("nope")

    @responses.activate
    def test_unprocessable_ref(self, client):
        """Test a 422 becomes NotFoundError."""
        responses.add(
            responses.GET,
            f"{API}/commits/nope",
            json={"message": "No commit found for SHA: nope"},
            status=422,
        )

        with pytest.raises(NotFoundError):
            client.get_head_commit("nope")

    @responses.activate
    def test_server_error(self, client):
        """Test a 5xx is reported as NotFoundError chained from the HTTP error."""
        responses.add(responses.GET, f"{API}/commits/master", json={}, status=500)

        with pytest.raises(NotFoundError, match="branch master: 500") as exc_info:
            client.get_head_commit("master")

        assert isinstance(exc_info.value.__cause__, TransferError)
        assert exc_info.value.__cause__.status_code == 500

    @responses.activate
    def test_bad_credentials(self, client):
        """Test a 401 is reported as NotFoundError with the API message."""
        responses.add(
            responses.GET,
            f"{API}/commits/master",
            json={"message": "Bad credentials"},
            status=401,
        )

        with pytest.raises(NotFoundError, match="branch master: Bad credentials"):
            client.get_head_commit("master")

    @responses.activate
    def test_non_json_error(self, client):
        """Test an error page that is not JSON raises DecodeError."""
        responses.add(
            responses.GET, f"{API}/commits/master", body="<html>oops</html>", status=502
        )

        with pytest.raises(DecodeError):
            client.get_head_commit("master")

    @responses.activate
    def test_malformed_success_body(self, client):
        """Test a 200 without a sha raises DecodeError."""
        responses.add(responses.GET, f"{API}/commits/master", json={"commit": {}})

        with pytest.raises(DecodeError):
            client.get_head_commit("master")

    @responses.activate
    def test_connection_error(self, client):
        """Test transport failures without a response stay TransferError."""
        responses.add(
            responses.GET,
            f"{API}/commits/master",
            body=requests.exceptions.ConnectionError("unreachable"),
        )

        with pytest.raises(TransferError, match="unreachable") as exc_info:
            client.get_head_commit("master")

        assert not isinstance(exc_info.value, NotFoundError)
        assert exc_info.value.status_code is None


class TestGetLastRunOfBranch:
    """Tests for GitHubClient.get_last_run_of_branch."""

    @responses.activate
    def test_matching_run(self, client):
        """Test the latest run is returned when it built the head commit."""
        responses.add(
            responses.GET,
            RUNS_URL,
            json={"total_count": 2, "workflow_runs": [_run(2, HEAD), _run(1, "old")]},
            match=[matchers.query_param_matcher({"branch": "master"})],
        )

        run = client.get_last_run_of_branch("master", HEAD)

        assert run.id == 2
        assert run.head_sha == HEAD

    @responses.activate
    def test_stale_run(self, client):
        """Test an older build is never substituted."""
        responses.add(
            responses.GET,
            RUNS_URL,
            json={"total_count": 2, "workflow_runs": [_run(2, "old"), _run(1, HEAD)]},
        )

        with pytest.raises(NotFoundError, match="not " + HEAD):
            client.get_last_run_of_branch("master", HEAD)

    @responses.activate
    def test_no_runs(self, client):
        """Test a branch without runs raises NotFoundError."""
        responses.add(
            responses.GET, RUNS_URL, json={"total_count": 0, "workflow_runs": []}
        )

        with pytest.raises(NotFoundError, match="no build.yml runs"):
            client.get_last_run_of_branch("feature", HEAD)


class TestGetArtifactDownloadUrl:
    """Tests for GitHubClient.get_artifact_download_url."""

    @responses.activate
    def test_platform_artifact(self, client):
        """Test the artifact named after the OS is chosen."""
        responses.add(
            responses.GET,
            f"{API}/actions/runs/7/artifacts",
            json=_artifacts("darwin-amd64", "linux-amd64", "windows-amd64"),
        )

        url = client.get_artifact_download_url(7)

        assert url == f"{API}/actions/artifacts/2/zip"

    @responses.activate
    def test_artifact_is_amd64_on_arm(self):
        """Test the artifact name is '<os>-amd64' regardless of architecture."""
        client = GitHubClient(platform=PlatformInfo("darwin", "arm64"))
        responses.add(
            responses.GET,
            f"{API}/actions/runs/7/artifacts",
            json=_artifacts("darwin-amd64"),
        )

        assert client.artifact_name == "darwin-amd64"
        assert client.get_artifact_download_url(7) == f"{API}/actions/artifacts/1/zip"

    @responses.activate
    def test_missing_artifact(self, client):
        """Test a run without this platform's artifact raises NotFoundError."""
        responses.add(
            responses.GET,
            f"{API}/actions/runs/7/artifacts",
            json=_artifacts("darwin-amd64"),
        )

        with pytest.raises(NotFoundError, match="linux-amd64"):
            client.get_artifact_download_url(7)


class TestResolveDownloadUrl:
    """Tests for GitHubClient.resolve_download_url."""

    @responses.activate
    def test_release_tag_needs_no_api(self, client):
        """Test release tags map to the release asset without requests."""
        url = client.resolve_download_url("21.02.02", HEAD)

        assert url == (
            "https://github.com/opendexnetwork/opendex-docker/releases/download/"
            "21.02.02/launcher-linux-amd64.zip"
        )
        assert len(responses.calls) == 0

    def test_release_url_uses_arch(self):
        """Test the release asset carries the real architecture."""
        client = GitHubClient(platform=PlatformInfo("darwin", "arm64"))

        assert client.release_download_url("21.02.02").endswith(
            "/21.02.02/launcher-darwin-arm64.zip"
        )

    @responses.activate
    def test_branch_build(self, client):
        """Test a branch resolves through its latest run's artifact."""
        responses.add(
            responses.GET,
            RUNS_URL,
            json={"total_count": 1, "workflow_runs": [_run(9, HEAD)]},
        )
        responses.add(
            responses.GET,
            f"{API}/actions/runs/9/artifacts",
            json=_artifacts("linux-amd64"),
        )

        url = client.resolve_download_url("master", HEAD)

        assert url == f"{API}/actions/artifacts/1/zip"
        assert len(responses.calls) == 2

    @responses.activate
    def test_branch_without_launcher(self, client):
        """Test a stale build reports the branch has no binary launcher."""
        responses.add(
            responses.GET,
            RUNS_URL,
            json={"total_count": 1, "workflow_runs": [_run(9, "old")]},
        )

        with pytest.raises(NotFoundError) as exc_info:
            client.resolve_download_url("feature", HEAD)

        assert str(exc_info.value) == (
            f"no launcher build for commit {HEAD} "
            '(The branch "feature" does not have a binary launcher)'
        )
        assert len(responses.calls) == 1

    @responses.activate
    def test_api_failure_propagates(self, client):
        """Test API failures are not reported as missing builds."""
        responses.add(
            responses.GET, RUNS_URL, json={"message": "API rate limit exceeded"}, status=403
        )

        with pytest.raises(TransferError, match="rate limit"):
            client.resolve_download_url("master", HEAD)
