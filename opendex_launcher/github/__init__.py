"""
GitHub access for locating launcher builds.
"""

from .client import GitHubClient, is_release_ref
from .models import (
    ApiErrorBody,
    Artifact,
    ArtifactList,
    Commit,
    WorkflowRun,
    WorkflowRunList,
)

__all__ = [
    "GitHubClient",
    "is_release_ref",
    "ApiErrorBody",
    "Artifact",
    "ArtifactList",
    "Commit",
    "WorkflowRun",
    "WorkflowRunList",
]
