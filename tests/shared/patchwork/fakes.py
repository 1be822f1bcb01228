"""Fakes for the GitHub client, CircleCI client and git wrapper."""

import threading

from patchwork.errors import GitHubError
from patchwork.models import BuildSummary, RepositoryMetadata
from patchwork_logging.wrappers import ToolResult


class FakeGitHub:
    """Resolves every repository to deterministic metadata."""

    def __init__(self, events=None, fail_for=()):
        self.events = events if events is not None else []
        self.fail_for = set(fail_for)
        self._ids = {}

    def get_repository(self, owner, repo):
        full_name = f"{owner}/{repo}"
        self.events.append(("resolve", full_name))
        if full_name in self.fail_for:
            raise GitHubError(f"repository {full_name} not found or not accessible", status_code=404)
        repo_id = self._ids.setdefault(full_name, 1000 + len(self._ids))
        return RepositoryMetadata(
            id=repo_id,
            name=repo,
            full_name=full_name,
            ssh_url=f"git@github.com:{full_name}.git",
            clone_url=f"https://github.com/{full_name}.git",
        )


class FakeCircle:
    """Serves scripted build-summary lists per repository.

    ``responses`` maps "owner/repo" to a list of poll results; each result
    is a list of BuildSummary or an exception to raise. The last result is
    repeated once the script runs out.
    """

    def __init__(self, responses=None):
        self.responses = responses or {}
        self.calls = []
        self._lock = threading.Lock()

    def recent_builds(self, owner, repo, limit=30):
        full_name = f"{owner}/{repo}"
        with self._lock:
            self.calls.append(full_name)
            script = self.responses.get(full_name, [[]])
            index = min(self.calls.count(full_name) - 1, len(script) - 1)
            result = script[index]
        if isinstance(result, Exception):
            raise result
        return result


class FakeGit:
    """Records git invocations instead of running them.

    ``fail_on`` holds (step, "owner/repo") pairs whose call exits 128. The
    repository is recovered from the clone URL recorded for the workspace.
    """

    tool_name = "git"

    def __init__(self, events=None, fail_on=()):
        self.events = events if events is not None else []
        self.fail_on = set(fail_on)
        self._repo_by_cwd = {}

    def _record(self, step, args, cwd, check):
        if step == "clone":
            self._repo_by_cwd[cwd] = args[0].split(":", 1)[1].removesuffix(".git")
        repo = self._repo_by_cwd.get(cwd, "?")
        self.events.append((step, repo, tuple(args)))
        if (step, repo) in self.fail_on:
            result = ToolResult(command=["git", step, *args], exit_code=128, output=f"fatal: {step} failed", duration_ms=1.0, cwd=cwd)
            if check:
                result.check()
            return result
        return ToolResult(command=["git", step, *args], exit_code=0, output="", duration_ms=1.0, cwd=cwd)

    def clone(self, url, directory, *, cwd=None, check=False):
        return self._record("clone", [url, directory], cwd, check)

    def checkout(self, ref, *, create=False, cwd=None, check=False):
        return self._record("checkout", ["-b", ref] if create else [ref], cwd, check)

    def add(self, *paths, all=False, cwd=None, check=False):
        return self._record("add", ["-A"] if all else list(paths), cwd, check)

    def commit(self, message, *, cwd=None, check=False):
        return self._record("commit", ["-m", message], cwd, check)

    def push(self, remote="origin", branch=None, *, cwd=None, check=False):
        return self._record("push", [remote, branch], cwd, check)


def finished(branch, outcome="success", build_num=1):
    return BuildSummary(branch=branch, lifecycle="finished", outcome=outcome, build_num=build_num)


def running(branch, build_num=1):
    return BuildSummary(branch=branch, lifecycle="running", build_num=build_num)


def no_op_patch(metadata, workspace):
    """Transformation that changes nothing."""
