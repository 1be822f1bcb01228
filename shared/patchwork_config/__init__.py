"""
Configuration framework for patchwork.

Usage:
    from patchwork_config import PatchworkSettings

    settings = PatchworkSettings.from_env()
    result = settings.validate_all()
    if not result.all_valid:
        print("Configuration errors found")
"""

from .base import BaseConfig, ConfigStatus, HealthCheckResult, ValidationResult
from .configs import CircleCIConfig, GitHubConfig, RunConfig
from .settings import AggregateHealthResult, AggregateValidationResult, PatchworkSettings


__all__ = [
    "AggregateHealthResult",
    "AggregateValidationResult",
    "BaseConfig",
    "CircleCIConfig",
    "ConfigStatus",
    "GitHubConfig",
    "HealthCheckResult",
    "PatchworkSettings",
    "RunConfig",
    "ValidationResult",
]
