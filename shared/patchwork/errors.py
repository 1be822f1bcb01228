"""Exception hierarchy for patchwork."""

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from .models import ApplyReport, Repository


class PatchworkError(Exception):
    """Base class for every patchwork failure."""


class GitHubError(PatchworkError):
    """Repository metadata could not be fetched from GitHub."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class CircleCIError(PatchworkError):
    """Build summaries could not be fetched from CircleCI."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class WorkspaceError(PatchworkError):
    """A temporary workspace could not be created."""


class PreparationError(PatchworkError):
    """A repository could not be cloned, patched, committed or pushed.

    Attributes:
        repository: The repository being prepared
        step: Which step failed (resolve, workspace, clone, branch, patch, add, commit, push)
        output: Combined command output when the step was an external command
    """

    def __init__(self, repository: "Repository", step: str, cause: BaseException, output: str = ""):
        super().__init__(f"{repository}: {step} failed: {cause}")
        self.repository = repository
        self.step = step
        self.cause = cause
        self.output = output


class MonitorError(PatchworkError):
    """CI status for a repository could not be queried."""

    def __init__(self, repository: "Repository", cause: BaseException):
        super().__init__(f"{repository}: could not get recent builds: {cause}")
        self.repository = repository
        self.cause = cause


class MonitorCancelled(PatchworkError):
    """A monitor stopped polling because the run is being aborted."""

    def __init__(self, repository: "Repository"):
        super().__init__(f"{repository}: monitoring cancelled")
        self.repository = repository


class RunAborted(PatchworkError):
    """The run stopped on its first infrastructure error (fail-fast).

    Attributes:
        cause: The error that aborted the run
        report: Outcomes collected before the abort
    """

    def __init__(self, cause: PatchworkError, report: "ApplyReport"):
        super().__init__(f"run aborted: {cause}")
        self.cause = cause
        self.report = report


class PreparationCancelled(PatchworkError):
    """Preparation stopped before a step because the run is being aborted.

    Attributes:
        repository: The repository being prepared
        step: The step that was not started
    """

    def __init__(self, repository: "Repository", step: str):
        super().__init__(f"{repository}: cancelled before {step}")
        self.repository = repository
        self.step = step
