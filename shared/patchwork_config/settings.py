"""
All configuration a run needs, loaded and checked together.

Used by ``patchwork config`` and by ``patchwork apply`` before any
repository is touched.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any

from .base import BaseConfig, HealthCheckResult, ValidationResult
from .configs import CircleCIConfig, GitHubConfig, RunConfig


@dataclass
class AggregateValidationResult:
    """Per-section validation results, keyed by section name."""

    all_valid: bool
    results: dict[str, ValidationResult]

    def to_dict(self) -> dict[str, Any]:
        sections = {}
        for name, result in self.results.items():
            section = asdict(result)
            section["status"] = result.status.value
            sections[name] = section
        return {"all_valid": self.all_valid, "results": sections}


@dataclass
class AggregateHealthResult:
    """Per-section health results.

    status is "healthy" when every section passed, "unhealthy" when none
    did, and "degraded" otherwise.
    """

    status: str
    services: dict[str, HealthCheckResult]
    checked_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "services": {name: result.to_dict() for name, result in self.services.items()},
            "checked_at": self.checked_at.isoformat(),
        }


@dataclass
class PatchworkSettings:
    """The GitHub, CircleCI and run sections."""

    github: GitHubConfig = field(default_factory=GitHubConfig)
    circleci: CircleCIConfig = field(default_factory=CircleCIConfig)
    run: RunConfig = field(default_factory=RunConfig)

    @classmethod
    def from_env(cls) -> "PatchworkSettings":
        """Load every section.

        Raises:
            ValueError: If config.yaml or a PATCHWORK_* variable is malformed
        """
        return cls(GitHubConfig.from_env(), CircleCIConfig.from_env(), RunConfig.from_env())

    @property
    def sections(self) -> dict[str, BaseConfig]:
        return {section.service_name: section for section in (self.github, self.circleci, self.run)}

    def get(self, name: str) -> BaseConfig | None:
        return self.sections.get(name)

    def validate_all(self) -> AggregateValidationResult:
        results = {name: section.validate() for name, section in self.sections.items()}
        return AggregateValidationResult(all(r.is_valid for r in results.values()), results)

    def health_check_all(self, timeout: float = 5.0) -> AggregateHealthResult:
        results = {name: section.health_check(timeout=timeout) for name, section in self.sections.items()}

        passed = sum(result.healthy for result in results.values())
        if passed == len(results):
            status = "healthy"
        elif passed == 0:
            status = "unhealthy"
        else:
            status = "degraded"
        return AggregateHealthResult(status, results)

    def to_dict(self) -> dict[str, Any]:
        return {name: section.to_dict() for name, section in self.sections.items()}
