"""GitHub REST client for repository lookups."""

import requests
from patchwork_logging import get_logger

from .errors import GitHubError
from .models import RepositoryMetadata


logger = get_logger("patchwork.github")

GITHUB_API_BASE = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"


class GitHubClient:
    """Resolves owner/repo to clone metadata.

    Usage:
        client = GitHubClient(token)
        metadata = client.get_repository("owner", "repo")
        metadata.ssh_url  # "git@github.com:owner/repo.git"
    """

    def __init__(
        self,
        token: str,
        base_url: str = GITHUB_API_BASE,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": GITHUB_API_VERSION,
                "User-Agent": "patchwork",
            }
        )

    def get_repository(self, owner: str, repo: str) -> RepositoryMetadata:
        """Fetch repository metadata.

        Raises:
            GitHubError: On transport failure, a non-200 response or a payload
                missing id/name/ssh_url
        """
        url = f"{self.base_url}/repos/{owner}/{repo}"

        try:
            response = self._session.get(url, timeout=self.timeout)
        except requests.Timeout as e:
            raise GitHubError(f"timed out fetching {owner}/{repo}") from e
        except requests.RequestException as e:
            raise GitHubError(f"request for {owner}/{repo} failed: {e}") from e

        if response.status_code == 404:
            raise GitHubError(f"repository {owner}/{repo} not found or not accessible", status_code=404)
        if response.status_code in (401, 403):
            raise GitHubError(
                f"access to {owner}/{repo} denied (HTTP {response.status_code})",
                status_code=response.status_code,
            )
        if response.status_code != 200:
            raise GitHubError(
                f"unexpected HTTP {response.status_code} fetching {owner}/{repo}",
                status_code=response.status_code,
            )

        try:
            metadata = RepositoryMetadata.from_api(response.json())
        except (ValueError, KeyError, TypeError) as e:
            raise GitHubError(f"malformed repository payload for {owner}/{repo}: {e}") from e

        logger.debug("Fetched repository metadata", repository=f"{owner}/{repo}", repo_id=metadata.id)
        return metadata
