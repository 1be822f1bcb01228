"""
GitHub configuration.

The token is taken from $GITHUB_TOKEN, else from GITHUB_TOKEN in
~/.config/patchwork/secrets.env. It is only used for repository lookups;
clone and push go through the local git credentials.
"""

import os
from dataclasses import dataclass, field
from typing import Any

from ..base import BaseConfig, HealthCheckResult, ValidationResult
from ..utils import load_env_file, probe_credentials, secrets_file
from ..validators import mask_secret, validate_github_token, validate_non_empty


DEFAULT_GITHUB_API_URL = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"


@dataclass
class GitHubConfig(BaseConfig):
    """GitHub REST API access.

    Attributes:
        token: Token used for GET /repos/{owner}/{repo}
        api_url: REST base URL (GitHub Enterprise: https://HOST/api/v3)
    """

    token: str = ""
    api_url: str = DEFAULT_GITHUB_API_URL

    _token_source: str = field(default="", repr=False)

    def validate(self) -> ValidationResult:
        errors: list[str] = []
        warnings: list[str] = []

        ok, problem = validate_non_empty(self.token, "GITHUB_TOKEN")
        if not ok:
            errors.append(problem)
        else:
            # Enterprise and legacy tokens do not always carry a known prefix
            ok, problem = validate_github_token(self.token)
            if not ok:
                warnings.append(f"token: {problem}")

        if not self.api_url.startswith("https://"):
            warnings.append(f"api_url is not HTTPS: {self.api_url}")

        return ValidationResult.from_checks(errors, warnings)

    def health_check(self, timeout: float = 5.0) -> HealthCheckResult:
        """GET /user with the token."""
        if not self.token:
            return HealthCheckResult(healthy=False, service_name="github", message="Token not configured")
        return probe_credentials(
            "github",
            f"{self.api_url.rstrip('/')}/user",
            {
                "Authorization": f"Bearer {self.token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": GITHUB_API_VERSION,
            },
            timeout,
            rejected_message="Token is invalid or expired",
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"token": mask_secret(self.token), "api_url": self.api_url}
        if self._token_source:
            data["token_source"] = self._token_source
        return data

    @classmethod
    def from_env(cls) -> "GitHubConfig":
        secrets = load_env_file(secrets_file())
        config = cls(api_url=os.environ.get("GITHUB_API_URL") or secrets.get("GITHUB_API_URL", DEFAULT_GITHUB_API_URL))

        if os.environ.get("GITHUB_TOKEN"):
            config.token, config._token_source = os.environ["GITHUB_TOKEN"], "environment"
        elif secrets.get("GITHUB_TOKEN"):
            config.token, config._token_source = secrets["GITHUB_TOKEN"], "secrets.env"

        return config
