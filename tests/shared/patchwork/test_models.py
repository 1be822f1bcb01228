"""Tests for patchwork.models module."""

import pytest

from patchwork.models import (
    ApplyOptions,
    ApplyReport,
    BuildSummary,
    OutcomeStatus,
    RepoOutcome,
    Repository,
    RepositoryMetadata,
)


class TestRepository:
    """Tests for Repository."""

    def test_str(self):
        assert str(Repository("acme", "api")) == "acme/api"

    def test_parse(self):
        assert Repository.parse(" acme/api ") == Repository("acme", "api")

    @pytest.mark.parametrize("value", ["acme", "acme/", "/api", "acme/api/extra", ""])
    def test_parse_invalid(self, value):
        with pytest.raises(ValueError, match="owner/repo"):
            Repository.parse(value)

    def test_hashable(self):
        """Test that repositories can be used as dict keys."""
        assert {Repository("a", "x"): 1}[Repository("a", "x")] == 1


class TestApplyOptions:
    """Tests for ApplyOptions defaults."""

    def test_defaults(self):
        options = ApplyOptions(message="m", branch="b")
        assert options.repos == []
        assert options.fail_fast is True
        assert options.poll_interval == 120.0
        assert options.max_wait is None
        assert options.max_monitors is None

    @pytest.mark.parametrize(
        "kwargs, message",
        [
            ({"poll_interval": -1.0}, "poll_interval"),
            ({"max_wait": 0}, "max_wait"),
            ({"max_wait": -30.0}, "max_wait"),
            ({"max_monitors": 0}, "max_monitors"),
            ({"max_monitors": -1}, "max_monitors"),
        ],
    )
    def test_rejects_invalid_limits(self, kwargs, message):
        """Test that limits the monitor pool cannot honour are refused up front."""
        with pytest.raises(ValueError, match=message):
            ApplyOptions(message="m", branch="b", **kwargs)

    def test_zero_poll_interval_allowed(self):
        assert ApplyOptions(message="m", branch="b", poll_interval=0.0).poll_interval == 0.0


class TestRepositoryMetadata:
    """Tests for RepositoryMetadata.from_api()."""

    def test_from_api(self):
        metadata = RepositoryMetadata.from_api(
            {"id": "42", "name": "api", "full_name": "acme/api", "ssh_url": "git@github.com:acme/api.git"}
        )
        assert metadata.id == 42
        assert metadata.clone_url == ""
        assert metadata.default_branch == "main"

    def test_from_api_missing_ssh_url(self):
        with pytest.raises(KeyError):
            RepositoryMetadata.from_api({"id": 1, "name": "api"})


class TestBuildSummary:
    """Tests for BuildSummary."""

    def test_empty_summary_is_not_finished(self):
        summary = BuildSummary()
        assert not summary.is_finished
        assert not summary.is_success

    def test_from_api_treats_null_as_empty(self):
        """Test that null fields from CircleCI become empty strings."""
        summary = BuildSummary.from_api({"branch": "fix", "lifecycle": "queued", "outcome": None, "status": None})
        assert summary.outcome == ""
        assert summary.status == ""
        assert summary.lifecycle == "queued"

    def test_success_requires_exact_outcome(self):
        summary = BuildSummary(branch="fix", lifecycle="finished", outcome="Success")
        assert summary.is_finished
        assert not summary.is_success

    def test_str_contains_all_fields(self):
        summary = BuildSummary(branch="fix", lifecycle="finished", outcome="failed", build_num=7)
        text = str(summary)
        assert text.startswith("{") and text.endswith("}")
        for part in ("branch=fix", "lifecycle=finished", "outcome=failed", "build_num=7"):
            assert part in text


class TestApplyReport:
    """Tests for ApplyReport."""

    def make_report(self):
        return ApplyReport(
            outcomes=[
                RepoOutcome(Repository("a", "x"), OutcomeStatus.SUCCEEDED, summary=BuildSummary(outcome="success")),
                RepoOutcome(Repository("a", "y"), OutcomeStatus.FAILED, summary=BuildSummary(outcome="failed")),
                RepoOutcome(Repository("a", "z"), OutcomeStatus.ERROR, error="boom"),
                RepoOutcome(Repository("a", "w"), OutcomeStatus.TIMED_OUT, waited=60.04),
            ]
        )

    def test_grouping(self):
        report = self.make_report()
        assert len(report.succeeded) == 1
        assert len(report.failed) == 1
        assert len(report.errors) == 1
        assert len(report.timed_out) == 1
        assert not report.all_succeeded

    def test_get(self):
        report = self.make_report()
        assert report.get(Repository("a", "z")).error == "boom"
        assert report.get(Repository("a", "missing")) is None

    def test_empty_report_all_succeeded(self):
        assert ApplyReport().all_succeeded

    def test_to_dict(self):
        data = self.make_report().to_dict()
        assert data["total"] == 4
        assert data["errors"] == 1
        assert data["outcomes"][0]["repository"] == "a/x"
        assert data["outcomes"][0]["summary"]["outcome"] == "success"
        assert data["outcomes"][2]["error"] == "boom"
        assert "summary" not in data["outcomes"][2]
        assert data["outcomes"][3]["waited"] == 60.0
