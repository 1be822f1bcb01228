"""
Config sections and the results they report.

Each section (GitHub, CircleCI, run settings) loads itself from the
environment and ~/.config/patchwork/, validates locally, and can check
its credentials against the remote service.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ConfigStatus(Enum):
    VALID = "valid"
    INVALID = "invalid"


@dataclass
class ValidationResult:
    """Outcome of validating one section.

    Errors block a run; warnings are only reported.
    """

    status: ConfigStatus
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return self.status is ConfigStatus.VALID

    @classmethod
    def valid(cls, warnings: list[str] | None = None) -> "ValidationResult":
        return cls(ConfigStatus.VALID, [], list(warnings or []))

    @classmethod
    def invalid(cls, errors: list[str], warnings: list[str] | None = None) -> "ValidationResult":
        return cls(ConfigStatus.INVALID, list(errors), list(warnings or []))

    @classmethod
    def from_checks(cls, errors: list[str], warnings: list[str]) -> "ValidationResult":
        return cls.invalid(errors, warnings) if errors else cls.valid(warnings)


@dataclass
class HealthCheckResult:
    """Whether a remote service accepted the configured credentials.

    latency_ms is set only when a request completed.
    """

    healthy: bool
    service_name: str
    message: str
    latency_ms: float | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"healthy": self.healthy, "message": self.message}
        if self.latency_ms is not None:
            data["latency_ms"] = round(self.latency_ms, 1)
        return data


class BaseConfig(ABC):
    """One configuration section.

    from_env() precedence: environment variables, then files under
    ~/.config/patchwork/, then defaults. to_dict() masks secrets.
    """

    @abstractmethod
    def validate(self) -> ValidationResult: ...

    @abstractmethod
    def health_check(self, timeout: float = 5.0) -> HealthCheckResult: ...

    @abstractmethod
    def to_dict(self) -> dict[str, Any]: ...

    @classmethod
    @abstractmethod
    def from_env(cls) -> "BaseConfig": ...

    @property
    def service_name(self) -> str:
        """Section name: the class name without its "Config" suffix, lowercased."""
        return self.__class__.__name__.removesuffix("Config").lower()
