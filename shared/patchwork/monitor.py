"""
Build monitoring: poll CircleCI until the branch's build finishes.

Each repository is POLLING until the latest summary for the branch reaches
the "finished" lifecycle, then FINISHED. A missing summary counts as not
finished. With max_wait set, the last poll happens at the deadline and a
build that has not finished by then ends as TIMED_OUT.
"""

import threading
import time
from collections.abc import Callable, Iterable

from patchwork_logging import ContextScope, get_logger

from .circleci import CircleCIClient
from .errors import CircleCIError, MonitorCancelled, MonitorError
from .models import BuildSummary, OutcomeStatus, RepoOutcome, Repository


logger = get_logger("patchwork.monitor")


def latest_summary(branch: str, summaries: Iterable[BuildSummary]) -> BuildSummary:
    """Return the first summary whose branch equals ``branch`` exactly.

    Summaries are expected most recent first. When nothing matches the
    empty summary is returned, which is never finished.
    """
    for summary in summaries:
        if summary.branch == branch:
            return summary
    return BuildSummary()


class BuildMonitor:
    """Waits for the CI result of one branch on one repository at a time.

    Args:
        circle: CircleCI client
        branch: Branch to watch
        poll_interval: Seconds between polls
        max_wait: Give up after this many seconds (None polls forever)
        stop_event: Set by the orchestrator to abort; wakes sleeping monitors
        sleep: Replaces the interruptible wait (tests)
        clock: Monotonic clock (tests)
    """

    def __init__(
        self,
        circle: CircleCIClient,
        branch: str,
        poll_interval: float = 120.0,
        max_wait: float | None = None,
        stop_event: threading.Event | None = None,
        sleep: Callable[[float], None] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.circle = circle
        self.branch = branch
        self.poll_interval = poll_interval
        self.max_wait = max_wait
        self.stop_event = stop_event or threading.Event()
        self._sleep = sleep or self.stop_event.wait
        self._clock = clock

    def watch(self, repository: Repository, run_id: str | None = None) -> RepoOutcome:
        """Poll until the build for the branch finishes.

        Returns:
            RepoOutcome with status SUCCEEDED, FAILED or TIMED_OUT

        Raises:
            MonitorError: If CircleCI cannot be queried
            MonitorCancelled: If the stop event is set while polling
        """
        with ContextScope(run_id=run_id, repository=str(repository), branch=self.branch):
            started = self._clock()
            polls = 0

            while True:
                if self.stop_event.is_set():
                    raise MonitorCancelled(repository)

                try:
                    summaries = self.circle.recent_builds(repository.owner, repository.repo)
                except CircleCIError as e:
                    logger.error("Could not get recent builds", error=str(e))
                    raise MonitorError(repository, e) from e
                polls += 1

                summary = latest_summary(self.branch, summaries)
                waited = self._clock() - started

                if summary.is_finished:
                    status = OutcomeStatus.SUCCEEDED if summary.is_success else OutcomeStatus.FAILED
                    logger.info("Build finished", outcome=summary.outcome, build_num=summary.build_num, polls=polls)
                    return RepoOutcome(repository, status, summary=summary, polls=polls, waited=waited)

                if self.max_wait is not None and waited >= self.max_wait:
                    logger.warning("Gave up waiting for build", waited=round(waited, 1), polls=polls)
                    return RepoOutcome(repository, OutcomeStatus.TIMED_OUT, summary=summary, polls=polls, waited=waited)

                delay = self._next_delay(waited)
                logger.debug(
                    "Build not finished",
                    lifecycle=summary.lifecycle or "none",
                    polls=polls,
                    next_poll_in=delay,
                )
                self._sleep(delay)

    def _next_delay(self, waited: float) -> float:
        """Poll interval, shortened so the last poll lands on the deadline."""
        if self.max_wait is None:
            return self.poll_interval
        return min(self.poll_interval, self.max_wait - waited)
