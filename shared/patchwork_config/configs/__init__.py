"""
Service-specific configuration classes.

- GitHubConfig: GitHub API token and base URL
- CircleCIConfig: CircleCI API token and base URL
- RunConfig: Polling, deadline, concurrency and error-policy settings
"""

from .circleci import CircleCIConfig
from .github import GitHubConfig
from .run import RunConfig

__all__ = [
    "CircleCIConfig",
    "GitHubConfig",
    "RunConfig",
]
