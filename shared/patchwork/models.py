"""Data types shared by the preparer, the monitor and the orchestrator."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class Repository:
    """A repository to be patched."""

    owner: str
    repo: str

    def __str__(self) -> str:
        return f"{self.owner}/{self.repo}"

    @classmethod
    def parse(cls, value: str) -> "Repository":
        """Parse "owner/repo".

        Raises:
            ValueError: If value is not exactly two non-empty path segments
        """
        owner, sep, repo = value.strip().partition("/")
        if not sep or not owner or not repo or "/" in repo:
            raise ValueError(f"Expected owner/repo, got: {value!r}")
        return cls(owner=owner, repo=repo)


@dataclass
class ApplyOptions:
    """Arguments for one apply run.

    Attributes:
        message: Commit message used on every repository
        branch: Branch created, pushed and monitored on every repository
        repos: Repositories in preparation order
        fail_fast: Abort the whole run on the first infrastructure error;
            when False the error is recorded for that repository and the
            run continues
        poll_interval: Seconds between CI polls
        max_wait: Seconds to wait for a finished build per repository
            (None waits forever)
        max_monitors: Concurrent monitor cap (None means one per repository)

    Raises:
        ValueError: If poll_interval is negative, or max_wait or max_monitors
            is set but not positive
    """

    message: str
    branch: str
    repos: list[Repository] = field(default_factory=list)
    fail_fast: bool = True
    poll_interval: float = 120.0
    max_wait: float | None = None
    max_monitors: int | None = None

    def __post_init__(self):
        if self.poll_interval < 0:
            raise ValueError(f"poll_interval must not be negative, got: {self.poll_interval}")
        if self.max_wait is not None and self.max_wait <= 0:
            raise ValueError(f"max_wait must be greater than zero, got: {self.max_wait}")
        if self.max_monitors is not None and self.max_monitors < 1:
            raise ValueError(f"max_monitors must be at least 1, got: {self.max_monitors}")


@dataclass(frozen=True)
class RepositoryMetadata:
    """The subset of GitHub's repository payload patchwork uses."""

    id: int
    name: str
    full_name: str
    ssh_url: str
    clone_url: str
    default_branch: str = "main"

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "RepositoryMetadata":
        return cls(
            id=int(data["id"]),
            name=data["name"],
            full_name=data.get("full_name", data["name"]),
            ssh_url=data["ssh_url"],
            clone_url=data.get("clone_url", ""),
            default_branch=data.get("default_branch") or "main",
        )


# CircleCI lifecycle after which a build's status no longer changes
FINISHED = "finished"
SUCCESS = "success"


@dataclass(frozen=True)
class BuildSummary:
    """One entry of CircleCI's recent-builds list.

    The default instance is the "no build yet" summary: every field empty,
    lifecycle not finished.
    """

    branch: str = ""
    lifecycle: str = ""
    outcome: str = ""
    build_num: int | None = None
    build_url: str = ""
    status: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "BuildSummary":
        return cls(
            branch=data.get("branch") or "",
            lifecycle=data.get("lifecycle") or "",
            outcome=data.get("outcome") or "",
            build_num=data.get("build_num"),
            build_url=data.get("build_url") or "",
            status=data.get("status") or "",
        )

    @property
    def is_finished(self) -> bool:
        return self.lifecycle == FINISHED

    @property
    def is_success(self) -> bool:
        return self.outcome == SUCCESS

    def to_dict(self) -> dict[str, Any]:
        return {
            "branch": self.branch,
            "lifecycle": self.lifecycle,
            "outcome": self.outcome,
            "build_num": self.build_num,
            "build_url": self.build_url,
            "status": self.status,
        }

    def __str__(self) -> str:
        return "{" + " ".join(f"{key}={value}" for key, value in self.to_dict().items()) + "}"


class OutcomeStatus(Enum):
    """Terminal state of one repository."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"  # CI finished with a non-success outcome
    ERROR = "error"  # infrastructure error, isolated when fail_fast is off
    TIMED_OUT = "timed_out"


@dataclass
class RepoOutcome:
    """Terminal result for one repository.

    Attributes:
        repository: The repository
        status: Terminal state
        summary: The finished build summary (SUCCEEDED/FAILED), or the last
            summary seen (TIMED_OUT)
        error: Error text (ERROR)
        polls: Number of CI queries made
        waited: Seconds spent monitoring
    """

    repository: Repository
    status: OutcomeStatus
    summary: BuildSummary | None = None
    error: str | None = None
    polls: int = 0
    waited: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "repository": str(self.repository),
            "status": self.status.value,
            "polls": self.polls,
            "waited": round(self.waited, 1),
        }
        if self.summary is not None:
            result["summary"] = self.summary.to_dict()
        if self.error is not None:
            result["error"] = self.error
        return result


@dataclass
class ApplyReport:
    """All terminal outcomes of a run, in completion order."""

    outcomes: list[RepoOutcome] = field(default_factory=list)

    def _with_status(self, status: OutcomeStatus) -> list[RepoOutcome]:
        return [outcome for outcome in self.outcomes if outcome.status is status]

    @property
    def succeeded(self) -> list[RepoOutcome]:
        return self._with_status(OutcomeStatus.SUCCEEDED)

    @property
    def failed(self) -> list[RepoOutcome]:
        return self._with_status(OutcomeStatus.FAILED)

    @property
    def errors(self) -> list[RepoOutcome]:
        return self._with_status(OutcomeStatus.ERROR)

    @property
    def timed_out(self) -> list[RepoOutcome]:
        return self._with_status(OutcomeStatus.TIMED_OUT)

    @property
    def all_succeeded(self) -> bool:
        return len(self.succeeded) == len(self.outcomes)

    def get(self, repository: Repository) -> RepoOutcome | None:
        for outcome in self.outcomes:
            if outcome.repository == repository:
                return outcome
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": len(self.outcomes),
            "succeeded": len(self.succeeded),
            "failed": len(self.failed),
            "errors": len(self.errors),
            "timed_out": len(self.timed_out),
            "outcomes": [outcome.to_dict() for outcome in self.outcomes],
        }
