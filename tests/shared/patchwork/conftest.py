"""Fixtures wiring the fakes together for orchestration tests."""

import pytest
from fakes import FakeGit, FakeGitHub


@pytest.fixture
def events():
    """Shared, ordered log of fake GitHub and git calls."""
    return []


@pytest.fixture
def fake_github(events):
    return FakeGitHub(events)


@pytest.fixture
def fake_git(events):
    return FakeGit(events)
