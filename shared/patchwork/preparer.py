"""
Repository preparation: resolve, clone, branch, transform, commit, push.

One repository at a time. The transformation receives the workspace path
explicitly; the process working directory is never changed.
"""

import subprocess
import threading
from collections.abc import Callable
from pathlib import Path

from patchwork_logging import ContextScope, get_logger, wrappers
from patchwork_logging.wrappers import GitWrapper

from .errors import GitHubError, PreparationCancelled, PreparationError, WorkspaceError
from .github import GitHubClient
from .models import ApplyOptions, Repository, RepositoryMetadata
from .workspace import Workspace


logger = get_logger("patchwork.preparer")

# Transformation callback: mutates files under the workspace path in place
PatchFunc = Callable[[RepositoryMetadata, Path], None]


class RepositoryPreparer:
    """Publishes one patched branch per repository.

    Steps run in order and each is a precondition for the next. Any failure
    raises PreparationError naming the step; nothing already pushed is
    rolled back.
    """

    def __init__(
        self,
        github: GitHubClient,
        git: GitWrapper | None = None,
        workspace_root: str | Path | None = None,
    ):
        self.github = github
        self.git = git or wrappers.git
        self.workspace_root = workspace_root

    def prepare(
        self,
        repository: Repository,
        options: ApplyOptions,
        patch: PatchFunc,
        stop_event: threading.Event | None = None,
    ) -> RepositoryMetadata:
        """Clone repository, apply patch on options.branch and push it.

        Args:
            stop_event: When set, no further git step is started for this
                repository

        Returns:
            The resolved repository metadata

        Raises:
            PreparationError: If any step fails
            PreparationCancelled: If stop_event was set before a step
        """
        stop = stop_event or threading.Event()
        with ContextScope(repository=str(repository), branch=options.branch):
            try:
                metadata = self.github.get_repository(repository.owner, repository.repo)
            except GitHubError as e:
                logger.error("Could not fetch GitHub information", error=str(e))
                raise PreparationError(repository, "resolve", e) from e

            try:
                workspace = Workspace(prefix=str(metadata.id), root=self.workspace_root)
                with workspace as path:
                    self._publish(repository, metadata, path, options, patch, stop)
            except WorkspaceError as e:
                logger.error("Could not create temporary directory", error=str(e))
                raise PreparationError(repository, "workspace", e) from e

            logger.info("Pushed branch", repo_id=metadata.id)
            return metadata

    def _publish(
        self,
        repository: Repository,
        metadata: RepositoryMetadata,
        path: Path,
        options: ApplyOptions,
        patch: PatchFunc,
        stop: threading.Event,
    ) -> None:
        directory = str(path)

        self._git(repository, stop, "clone", self.git.clone, metadata.ssh_url, directory, cwd=directory)
        self._git(repository, stop, "branch", self.git.checkout, options.branch, create=True, cwd=directory)

        logger.info("Applying patch", workspace=directory)
        try:
            patch(metadata, path)
        except Exception as e:
            logger.exception("Patch raised an error", workspace=directory)
            raise PreparationError(repository, "patch", e) from e

        self._git(repository, stop, "add", self.git.add, all=True, cwd=directory)
        self._git(repository, stop, "commit", self.git.commit, options.message, cwd=directory)
        self._git(repository, stop, "push", self.git.push, "origin", options.branch, cwd=directory)

    def _git(
        self, repository: Repository, stop: threading.Event, step: str, operation: Callable, *args, **kwargs
    ) -> None:
        """Run one git step, translating failures into PreparationError.

        Nothing is run once stop is set.
        """
        if stop.is_set():
            logger.warning("Run aborted, not starting step", step=step)
            raise PreparationCancelled(repository, step)
        try:
            operation(*args, check=True, **kwargs)
        except subprocess.CalledProcessError as e:
            raise PreparationError(repository, step, e, output=e.output or "") from e
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.with_context(step=step).error("Could not run git", error=str(e))
            raise PreparationError(repository, step, e) from e
