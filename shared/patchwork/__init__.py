"""
patchwork - apply a patch across repositories and verify it in CI.

Usage:
    from patchwork import ApplyOptions, Patchwork, Repository

    def patch(metadata, workspace):
        (workspace / "CODEOWNERS").write_text("* @acme/platform\\n")

    report = Patchwork(github_token, circle_token).apply(
        ApplyOptions(message="Add CODEOWNERS", branch="codeowners", repos=[Repository("acme", "api")]),
        patch,
    )
"""

from .circleci import CircleCIClient
from .errors import (
    CircleCIError,
    GitHubError,
    MonitorCancelled,
    MonitorError,
    PatchworkError,
    PreparationCancelled,
    PreparationError,
    RunAborted,
    WorkspaceError,
)
from .github import GitHubClient
from .models import (
    ApplyOptions,
    ApplyReport,
    BuildSummary,
    OutcomeStatus,
    RepoOutcome,
    Repository,
    RepositoryMetadata,
)
from .monitor import BuildMonitor, latest_summary
from .orchestrator import Patchwork, format_outcome
from .preparer import RepositoryPreparer
from .workspace import Workspace


__all__ = [
    "ApplyOptions",
    "ApplyReport",
    "BuildMonitor",
    "BuildSummary",
    "CircleCIClient",
    "CircleCIError",
    "GitHubClient",
    "GitHubError",
    "MonitorCancelled",
    "MonitorError",
    "OutcomeStatus",
    "Patchwork",
    "PatchworkError",
    "PreparationCancelled",
    "PreparationError",
    "RepoOutcome",
    "Repository",
    "RepositoryMetadata",
    "RepositoryPreparer",
    "RunAborted",
    "Workspace",
    "WorkspaceError",
    "format_outcome",
    "latest_summary",
]

__version__ = "0.1.0"
