"""
CircleCI configuration.

The token is taken from $CIRCLE_TOKEN or $CIRCLECI_TOKEN, else from the
same keys in ~/.config/patchwork/secrets.env.
"""

import os
from dataclasses import dataclass, field
from typing import Any

from ..base import BaseConfig, HealthCheckResult, ValidationResult
from ..utils import load_env_file, probe_credentials, secrets_file
from ..validators import mask_secret, validate_circleci_token, validate_non_empty


DEFAULT_CIRCLECI_API_URL = "https://circleci.com/api/v1.1"
TOKEN_ENV_VARS = ("CIRCLE_TOKEN", "CIRCLECI_TOKEN")
VCS_TYPES = ("github", "bitbucket")


@dataclass
class CircleCIConfig(BaseConfig):
    """CircleCI v1.1 API access.

    Attributes:
        token: Personal API token
        api_url: v1.1 base URL
        vcs_type: VCS slug in project paths
    """

    token: str = ""
    api_url: str = DEFAULT_CIRCLECI_API_URL
    vcs_type: str = "github"

    _token_source: str = field(default="", repr=False)

    def validate(self) -> ValidationResult:
        errors: list[str] = []
        warnings: list[str] = []

        ok, problem = validate_non_empty(self.token, "CIRCLE_TOKEN")
        if not ok:
            errors.append(problem)
        else:
            ok, problem = validate_circleci_token(self.token)
            if not ok:
                warnings.append(f"token: {problem}")

        if self.vcs_type not in VCS_TYPES:
            errors.append(f"vcs_type must be one of {', '.join(VCS_TYPES)}, got: {self.vcs_type}")

        return ValidationResult.from_checks(errors, warnings)

    def health_check(self, timeout: float = 5.0) -> HealthCheckResult:
        """GET /me with the token."""
        if not self.token:
            return HealthCheckResult(healthy=False, service_name="circleci", message="Token not configured")
        return probe_credentials(
            "circleci",
            f"{self.api_url.rstrip('/')}/me",
            {"Circle-Token": self.token, "Accept": "application/json"},
            timeout,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "token": mask_secret(self.token),
            "api_url": self.api_url,
            "vcs_type": self.vcs_type,
        }
        if self._token_source:
            data["token_source"] = self._token_source
        return data

    @classmethod
    def from_env(cls) -> "CircleCIConfig":
        secrets = load_env_file(secrets_file())
        config = cls(
            api_url=os.environ.get("CIRCLECI_API_URL") or secrets.get("CIRCLECI_API_URL", DEFAULT_CIRCLECI_API_URL),
            vcs_type=os.environ.get("CIRCLECI_VCS_TYPE") or secrets.get("CIRCLECI_VCS_TYPE", "github"),
        )

        for source, values in (("environment", os.environ), ("secrets.env", secrets)):
            token = next((values[var] for var in TOKEN_ENV_VARS if values.get(var)), "")
            if token:
                config.token, config._token_source = token, source
                break

        return config
