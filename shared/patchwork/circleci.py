"""CircleCI v1.1 client for recent build summaries."""

import requests
from patchwork_logging import get_logger

from .errors import CircleCIError
from .models import BuildSummary


logger = get_logger("patchwork.circleci")

CIRCLECI_API_BASE = "https://circleci.com/api/v1.1"


class CircleCIClient:
    """Lists recent builds for a project.

    CircleCI returns builds most recent first; callers rely on that order
    without re-sorting.
    """

    def __init__(
        self,
        token: str,
        base_url: str = CIRCLECI_API_BASE,
        vcs_type: str = "github",
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.vcs_type = vcs_type
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({"Circle-Token": token, "Accept": "application/json"})

    def recent_builds(self, owner: str, repo: str, limit: int = 30) -> list[BuildSummary]:
        """Return recent build summaries for owner/repo across all branches.

        Raises:
            CircleCIError: On transport failure, a non-200 response or a
                body that is not a list of objects
        """
        url = f"{self.base_url}/project/{self.vcs_type}/{owner}/{repo}"

        try:
            response = self._session.get(url, params={"limit": limit}, timeout=self.timeout)
        except requests.Timeout as e:
            raise CircleCIError(f"timed out fetching builds for {owner}/{repo}") from e
        except requests.RequestException as e:
            raise CircleCIError(f"request for {owner}/{repo} builds failed: {e}") from e

        if response.status_code != 200:
            raise CircleCIError(
                f"unexpected HTTP {response.status_code} fetching builds for {owner}/{repo}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise CircleCIError(f"invalid JSON in builds for {owner}/{repo}: {e}") from e

        if not isinstance(payload, list) or not all(isinstance(item, dict) for item in payload):
            raise CircleCIError(f"expected a list of builds for {owner}/{repo}, got {type(payload).__name__}")

        summaries = [BuildSummary.from_api(item) for item in payload]
        logger.debug("Fetched recent builds", repository=f"{owner}/{repo}", count=len(summaries))
        return summaries
