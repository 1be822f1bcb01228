"""Tests for patchwork.monitor module."""

import threading

import pytest
from fakes import FakeCircle, finished, running

from patchwork.errors import CircleCIError, MonitorCancelled, MonitorError
from patchwork.models import BuildSummary, OutcomeStatus, Repository
from patchwork.monitor import BuildMonitor, latest_summary


class FakeClock:
    """Monotonic clock advanced only by the recorded sleeps."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


REPO = Repository("acme", "api")


def make_monitor(circle, clock, **kwargs):
    kwargs.setdefault("poll_interval", 120.0)
    return BuildMonitor(circle, "fix-lint", sleep=clock.sleep, clock=clock, **kwargs)


class TestLatestSummary:
    """Tests for latest_summary()."""

    def test_first_exact_match_wins(self):
        """Test that the first summary for the branch is chosen."""
        summaries = [
            finished("main", build_num=9),
            running("fix-lint", build_num=8),
            finished("fix-lint", build_num=7),
        ]
        assert latest_summary("fix-lint", summaries).build_num == 8

    def test_prefix_is_not_a_match(self):
        """Test that branch matching is exact, not by prefix."""
        summaries = [finished("fix-lint-2"), finished("Fix-lint")]
        assert latest_summary("fix-lint", summaries) == BuildSummary()

    def test_no_match_returns_empty_summary(self):
        """Test that the empty summary is returned and is not finished."""
        summary = latest_summary("fix-lint", [])
        assert summary == BuildSummary()
        assert not summary.is_finished


class TestBuildMonitorWatch:
    """Tests for BuildMonitor.watch()."""

    def test_finished_success_is_succeeded(self):
        """Test that a finished successful build ends as SUCCEEDED."""
        circle = FakeCircle({"acme/api": [[finished("fix-lint")]]})
        clock = FakeClock()

        outcome = make_monitor(circle, clock).watch(REPO)

        assert outcome.status is OutcomeStatus.SUCCEEDED
        assert outcome.polls == 1
        assert clock.sleeps == []

    @pytest.mark.parametrize("result", ["failed", "canceled", "timedout", "infrastructure_fail", ""])
    def test_finished_non_success_is_failed(self, result):
        """Test that any finished outcome other than success ends as FAILED."""
        circle = FakeCircle({"acme/api": [[finished("fix-lint", outcome=result)]]})

        outcome = make_monitor(circle, FakeClock()).watch(REPO)

        assert outcome.status is OutcomeStatus.FAILED
        assert outcome.summary.outcome == result

    def test_success_outcome_before_finished_keeps_polling(self):
        """Test that only the finished lifecycle terminates monitoring."""
        not_yet = BuildSummary(branch="fix-lint", lifecycle="running", outcome="success")
        circle = FakeCircle({"acme/api": [[not_yet], [finished("fix-lint", outcome="failed")]]})

        outcome = make_monitor(circle, FakeClock()).watch(REPO)

        assert outcome.status is OutcomeStatus.FAILED
        assert outcome.polls == 2

    def test_missing_branch_polls_until_build_appears(self):
        """Test three empty polls followed by a successful build."""
        circle = FakeCircle(
            {
                "acme/api": [
                    [finished("main")],
                    [finished("main")],
                    [finished("main")],
                    [finished("fix-lint"), finished("main")],
                ]
            }
        )
        clock = FakeClock()

        outcome = make_monitor(circle, clock).watch(REPO)

        assert outcome.status is OutcomeStatus.SUCCEEDED
        assert outcome.polls == 4
        assert clock.sleeps == [120.0, 120.0, 120.0]
        assert outcome.waited == 360.0

    def test_circleci_error_raises_monitor_error(self):
        """Test that a failed CI query becomes MonitorError."""
        circle = FakeCircle({"acme/api": [CircleCIError("unexpected HTTP 500", status_code=500)]})

        with pytest.raises(MonitorError) as exc_info:
            make_monitor(circle, FakeClock()).watch(REPO)

        assert exc_info.value.repository == REPO
        assert isinstance(exc_info.value.cause, CircleCIError)

    def test_error_after_some_polls(self):
        """Test that a query error mid-way still raises."""
        circle = FakeCircle({"acme/api": [[running("fix-lint")], CircleCIError("boom")]})

        with pytest.raises(MonitorError):
            make_monitor(circle, FakeClock()).watch(REPO)

        assert circle.calls == ["acme/api", "acme/api"]


class TestBuildMonitorTimeout:
    """Tests for the max_wait bound."""

    def test_times_out_after_final_poll_at_deadline(self):
        """Test that the last interval is shortened to poll exactly at max_wait."""
        circle = FakeCircle({"acme/api": [[running("fix-lint")]]})
        clock = FakeClock()

        outcome = make_monitor(circle, clock, poll_interval=60.0, max_wait=150.0).watch(REPO)

        assert outcome.status is OutcomeStatus.TIMED_OUT
        assert clock.sleeps == [60.0, 60.0, 30.0]
        assert outcome.polls == 4
        assert outcome.waited == 150.0
        assert outcome.summary.lifecycle == "running"

    def test_build_finishing_before_deadline_is_seen(self):
        """Test that a build finished between the last full interval and max_wait succeeds."""
        circle = FakeCircle({"acme/api": [[running("fix-lint")], [running("fix-lint")], [finished("fix-lint")]]})
        clock = FakeClock()

        outcome = make_monitor(circle, clock, poll_interval=120.0, max_wait=200.0).watch(REPO)

        assert outcome.status is OutcomeStatus.SUCCEEDED
        assert outcome.polls == 3
        assert clock.sleeps == [120.0, 80.0]
        assert outcome.waited == 200.0

    def test_finished_on_last_allowed_poll_is_not_timed_out(self):
        """Test that a build finishing right at the limit is reported normally."""
        circle = FakeCircle({"acme/api": [[running("fix-lint")], [finished("fix-lint")]]})

        outcome = make_monitor(circle, FakeClock(), poll_interval=60.0, max_wait=60.0).watch(REPO)

        assert outcome.status is OutcomeStatus.SUCCEEDED

    def test_no_max_wait_polls_indefinitely(self):
        """Test that without max_wait the monitor keeps polling."""
        script = [[running("fix-lint")]] * 50 + [[finished("fix-lint")]]
        circle = FakeCircle({"acme/api": script})
        clock = FakeClock()

        outcome = make_monitor(circle, clock, poll_interval=1.0).watch(REPO)

        assert outcome.status is OutcomeStatus.SUCCEEDED
        assert len(clock.sleeps) == 50


class TestBuildMonitorCancellation:
    """Tests for stop_event handling."""

    def test_stop_before_first_poll(self):
        """Test that a set stop event cancels without querying CI."""
        stop = threading.Event()
        stop.set()
        circle = FakeCircle({"acme/api": [[running("fix-lint")]]})

        with pytest.raises(MonitorCancelled):
            make_monitor(circle, FakeClock(), stop_event=stop).watch(REPO)

        assert circle.calls == []

    def test_stop_while_sleeping(self):
        """Test that setting the stop event wakes a sleeping monitor."""
        stop = threading.Event()
        circle = FakeCircle({"acme/api": [[running("fix-lint")]]})
        monitor = BuildMonitor(circle, "fix-lint", poll_interval=3600.0, stop_event=stop)
        raised = []

        def run():
            try:
                monitor.watch(REPO)
            except MonitorCancelled as e:
                raised.append(e)

        thread = threading.Thread(target=run)
        thread.start()
        stop.set()
        thread.join(timeout=5)

        assert not thread.is_alive()
        assert len(raised) == 1
