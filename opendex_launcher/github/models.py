"""
Typed records of the GitHub REST API responses used by the launcher.

Only the fields the launcher reads are modeled. Every from_dict() raises
DecodeError when a required field is missing or has the wrong type.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional

import requests

from opendex_launcher.core.exceptions import DecodeError


def _require(data: Any, key: str, kind: type, record: str) -> Any:
    if not isinstance(data, dict):
        raise DecodeError(f"decode {record}: expected object, got {type(data).__name__}")
    value = data.get(key)
    # bool is an int subclass, but never a valid id or size
    if not isinstance(value, kind) or isinstance(value, bool):
        raise DecodeError(f"decode {record}: missing or invalid field '{key}'")
    return value


@dataclass
class Commit:
    """Response of GET /repos/{repo}/commits/{ref}."""

    sha: str

    @staticmethod
    def from_dict(data: dict) -> "Commit":
        return Commit(sha=_require(data, "sha", str, "commit"))


@dataclass
class WorkflowRun:
    """
    A CI run of the build workflow.

    Attributes:
        id: Run identifier used to list its artifacts
        created_at: ISO 8601 creation timestamp
        head_branch: Branch the run was triggered for
        head_sha: Commit the run built
    """

    id: int
    created_at: str
    head_branch: str
    head_sha: str

    @staticmethod
    def from_dict(data: dict) -> "WorkflowRun":
        return WorkflowRun(
            id=_require(data, "id", int, "workflow run"),
            created_at=data.get("created_at") or "",
            head_branch=data.get("head_branch") or "",
            head_sha=_require(data, "head_sha", str, "workflow run"),
        )


@dataclass
class WorkflowRunList:
    """Response of GET /actions/workflows/{workflow}/runs, newest run first."""

    total_count: int = 0
    workflow_runs: List[WorkflowRun] = field(default_factory=list)

    @staticmethod
    def from_dict(data: dict) -> "WorkflowRunList":
        runs = _require(data, "workflow_runs", list, "workflow run list")
        return WorkflowRunList(
            total_count=data.get("total_count") or 0,
            workflow_runs=[WorkflowRun.from_dict(run) for run in runs],
        )


@dataclass
class Artifact:
    """A build output attached to a workflow run."""

    name: str
    size_in_bytes: int
    archive_download_url: str

    @staticmethod
    def from_dict(data: dict) -> "Artifact":
        return Artifact(
            name=_require(data, "name", str, "artifact"),
            size_in_bytes=data.get("size_in_bytes") or 0,
            archive_download_url=_require(data, "archive_download_url", str, "artifact"),
        )


@dataclass
class ArtifactList:
    """Response of GET /actions/runs/{run_id}/artifacts."""

    total_count: int = 0
    artifacts: List[Artifact] = field(default_factory=list)

    @staticmethod
    def from_dict(data: dict) -> "ArtifactList":
        artifacts = _require(data, "artifacts", list, "artifact list")
        return ArtifactList(
            total_count=data.get("total_count") or 0,
            artifacts=[Artifact.from_dict(artifact) for artifact in artifacts],
        )

    def find(self, name: str) -> Optional[Artifact]:
        """Return the artifact with exactly this name, if any."""
        for artifact in self.artifacts:
            if artifact.name == name:
                return artifact
        return None


@dataclass
class ApiErrorBody:
    """
    Error body GitHub returns with non-2xx responses.

    Attributes:
        message: The API's message, or the HTTP status line when the body
            carries no string message
        status_code: HTTP status code of the response
    """

    message: str
    status_code: int

    @staticmethod
    def from_response(response: requests.Response) -> "ApiErrorBody":
        """
        Decode the error body of a failed response.

        Raises:
            DecodeError: If the body is not a JSON object
        """
        status_line = f"{response.status_code} {response.reason or ''}".strip()
        try:
            data = response.json()
        except ValueError as e:
            raise DecodeError(f"decode error response ({status_line}): {e}") from e

        if not isinstance(data, dict):
            raise DecodeError(
                f"decode error response ({status_line}): expected object, "
                f"got {type(data).__name__}"
            )

        message = data.get("message")
        if not isinstance(message, str) or not message:
            message = status_line
        return ApiErrorBody(message=message, status_code=response.status_code)
