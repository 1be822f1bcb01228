"""
Apply one patch across many repositories and collect their CI results.

Preparation runs in the caller's thread, strictly in input order. Each
prepared repository is handed through a one-slot queue to a dispatcher
thread that starts a build monitor for it in a thread pool, so repository
K is monitored while repository K+1 is being cloned and patched. A
sentinel closes the handoff after the last repository; the dispatcher then
waits for every monitor before apply() returns.
"""

import queue
import secrets
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, wait
from pathlib import Path

from patchwork_config import PatchworkSettings
from patchwork_logging import ContextScope, get_logger
from patchwork_logging.wrappers import GitWrapper

from .circleci import CircleCIClient
from .errors import (
    MonitorCancelled,
    MonitorError,
    PatchworkError,
    PreparationCancelled,
    PreparationError,
    RunAborted,
)
from .github import GitHubClient
from .models import ApplyOptions, ApplyReport, OutcomeStatus, RepoOutcome, Repository
from .monitor import BuildMonitor
from .preparer import PatchFunc, RepositoryPreparer


logger = get_logger("patchwork")

# Marks the end of the handoff
_CLOSED = object()

# Seconds between liveness checks while the handoff slot is full
_HANDOFF_POLL = 0.5


def _hand_off(handoff: queue.Queue, dispatcher: threading.Thread, item: object) -> bool:
    """Put item in the handoff slot; False if the dispatcher died first."""
    while dispatcher.is_alive():
        try:
            handoff.put(item, timeout=_HANDOFF_POLL)
            return True
        except queue.Full:
            continue
    return False


def format_outcome(outcome: RepoOutcome) -> str:
    """Render the one-line result printed for a repository."""
    repository = outcome.repository
    if outcome.status is OutcomeStatus.SUCCEEDED:
        return f"{repository} succeeded"
    if outcome.status is OutcomeStatus.FAILED:
        return f"{repository} failed {outcome.summary}"
    if outcome.status is OutcomeStatus.TIMED_OUT:
        return f"{repository} timed out after {outcome.waited:.0f}s {outcome.summary or ''}".rstrip()
    return f"{repository} error {outcome.error}"


def print_outcome(outcome: RepoOutcome) -> None:
    print(format_outcome(outcome), flush=True)


class _RunState:
    """Shared state of one apply run, guarded by a lock."""

    def __init__(self, on_result: Callable[[RepoOutcome], None]):
        self.report = ApplyReport()
        self.stop = threading.Event()
        self.fatal: PatchworkError | None = None
        self.unexpected: BaseException | None = None
        self._on_result = on_result
        self._lock = threading.Lock()

    def record(self, outcome: RepoOutcome) -> None:
        with self._lock:
            self.report.outcomes.append(outcome)
            self._on_result(outcome)

    def abort(self, error: PatchworkError) -> None:
        with self._lock:
            if self.fatal is None:
                self.fatal = error
        self.stop.set()

    def crash(self, error: BaseException) -> None:
        with self._lock:
            if self.unexpected is None:
                self.unexpected = error
        self.stop.set()


class Patchwork:
    """Applies a patch across repositories.

    Usage:
        patchwork = Patchwork(github_token, circle_token)
        report = patchwork.apply(
            ApplyOptions(message="Bump lint config", branch="bump-lint", repos=[Repository("a", "x")]),
            patch=lambda metadata, path: (path / ".lintrc").write_text("strict = true\\n"),
        )
    """

    def __init__(
        self,
        github_token: str = "",
        circle_token: str = "",
        *,
        github: GitHubClient | None = None,
        circle: CircleCIClient | None = None,
        git: GitWrapper | None = None,
        workspace_root: str | Path | None = None,
    ):
        self.github = github or GitHubClient(github_token)
        self.circle = circle or CircleCIClient(circle_token)
        self.preparer = RepositoryPreparer(self.github, git=git, workspace_root=workspace_root)

    @classmethod
    def from_settings(cls, settings: PatchworkSettings, **kwargs) -> "Patchwork":
        github = GitHubClient(settings.github.token, base_url=settings.github.api_url)
        circle = CircleCIClient(
            settings.circleci.token,
            base_url=settings.circleci.api_url,
            vcs_type=settings.circleci.vcs_type,
        )
        return cls(github=github, circle=circle, **kwargs)

    def apply(
        self,
        options: ApplyOptions,
        patch: PatchFunc,
        on_result: Callable[[RepoOutcome], None] | None = None,
    ) -> ApplyReport:
        """Prepare every repository in order and wait for all CI results.

        Args:
            options: Branch, message, repositories and run policy
            patch: Called with (metadata, workspace_path) for each repository
            on_result: Called once per terminal outcome, serialized; defaults
                to printing the result line to stdout

        Returns:
            ApplyReport with one outcome per repository

        Raises:
            RunAborted: With fail_fast, on the first preparation or CI query
                error. No further repository is prepared and pushed branches
                are left in place.
        """
        state = _RunState(on_result or print_outcome)
        run_id = secrets.token_hex(8)
        handoff: queue.Queue = queue.Queue(maxsize=1)
        monitor = BuildMonitor(
            self.circle,
            options.branch,
            poll_interval=options.poll_interval,
            max_wait=options.max_wait,
            stop_event=state.stop,
        )

        dispatcher = threading.Thread(
            target=self._dispatch,
            args=(handoff, monitor, options, state, run_id),
            name="patchwork-dispatcher",
            daemon=True,
        )
        dispatcher.start()

        with ContextScope(run_id=run_id, branch=options.branch):
            logger.info("Starting run", repositories=len(options.repos), fail_fast=options.fail_fast)
            try:
                self._prepare_all(handoff, dispatcher, options, patch, state)
            except BaseException:
                state.stop.set()
                raise
            finally:
                _hand_off(handoff, dispatcher, _CLOSED)
                dispatcher.join()

            if state.unexpected is not None:
                raise state.unexpected
            if state.fatal is not None:
                logger.error("Run aborted", error=str(state.fatal))
                raise RunAborted(state.fatal, state.report)

            report = state.report
            logger.info(
                "Run complete",
                succeeded=len(report.succeeded),
                failed=len(report.failed),
                errors=len(report.errors),
                timed_out=len(report.timed_out),
            )
            return report

    def _prepare_all(
        self,
        handoff: queue.Queue,
        dispatcher: threading.Thread,
        options: ApplyOptions,
        patch: PatchFunc,
        state: _RunState,
    ) -> None:
        for repository in options.repos:
            if state.stop.is_set():
                logger.warning("Stopping preparation", remaining_from=str(repository))
                return

            try:
                self.preparer.prepare(repository, options, patch, stop_event=state.stop)
            except PreparationCancelled as e:
                logger.warning("Stopping preparation", remaining_from=str(repository), skipped_step=e.step)
                return
            except PreparationError as e:
                if e.output:
                    logger.error("Command output", repository=str(repository), step=e.step, output=e.output.strip())
                if options.fail_fast:
                    state.abort(e)
                    return
                state.record(RepoOutcome(repository, OutcomeStatus.ERROR, error=str(e)))
                continue

            if not _hand_off(handoff, dispatcher, repository):
                logger.error("Dispatcher stopped, abandoning preparation", remaining_from=str(repository))
                return

    def _dispatch(
        self,
        handoff: queue.Queue,
        monitor: BuildMonitor,
        options: ApplyOptions,
        state: _RunState,
        run_id: str,
    ) -> None:
        max_workers = options.max_monitors or max(len(options.repos), 1)
        futures = []

        try:
            with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="patchwork-monitor") as executor:
                while True:
                    repository = handoff.get()
                    if repository is _CLOSED:
                        break
                    futures.append(executor.submit(self._monitor_one, monitor, repository, options, state, run_id))
                wait(futures)
        except Exception as e:
            logger.exception("Dispatcher failed")
            state.crash(e)

    def _monitor_one(
        self,
        monitor: BuildMonitor,
        repository: Repository,
        options: ApplyOptions,
        state: _RunState,
        run_id: str,
    ) -> None:
        try:
            outcome = monitor.watch(repository, run_id=run_id)
        except MonitorCancelled:
            return
        except MonitorError as e:
            if options.fail_fast:
                state.abort(e)
                return
            outcome = RepoOutcome(repository, OutcomeStatus.ERROR, error=str(e))
        except Exception as e:
            # Stops the other monitors now; apply() re-raises it
            state.crash(e)
            raise
        state.record(outcome)
