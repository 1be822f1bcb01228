"""
Git wrapper for patchwork_logging.

Only what publishing a patch needs: clone, create a branch, stage
everything, commit, push.
"""

from .base import ToolResult, ToolWrapper


class GitWrapper(ToolWrapper):
    """Logged git commands. Each method maps to exactly one git invocation.

    Usage:
        from patchwork_logging.wrappers import git

        workspace = "/tmp/1296269abc"
        git.clone("git@github.com:acme/api.git", workspace, cwd=workspace, check=True)
        git.checkout("fix-lint", create=True, cwd=workspace, check=True)
        git.add(all=True, cwd=workspace, check=True)
        git.commit("Fix lint", cwd=workspace, check=True)
        git.push("origin", "fix-lint", cwd=workspace, check=True)
    """

    tool_name = "git"

    def clone(self, url: str, directory: str, *, cwd: str | None = None, check: bool = False) -> ToolResult:
        """git clone URL DIRECTORY"""
        return self.run("clone", url, directory, cwd=cwd, check=check)

    def checkout(self, ref: str, *, create: bool = False, cwd: str | None = None, check: bool = False) -> ToolResult:
        """git checkout [-b] REF"""
        flags = ["-b"] if create else []
        return self.run("checkout", *flags, ref, cwd=cwd, check=check)

    def add(self, *paths: str, all: bool = False, cwd: str | None = None, check: bool = False) -> ToolResult:
        """git add -A, or git add PATH..."""
        targets = ["-A"] if all else list(paths)
        return self.run("add", *targets, cwd=cwd, check=check)

    def commit(self, message: str, *, cwd: str | None = None, check: bool = False) -> ToolResult:
        """git commit -m MESSAGE"""
        return self.run("commit", "-m", message, cwd=cwd, check=check)

    def push(
        self, remote: str = "origin", branch: str | None = None, *, cwd: str | None = None, check: bool = False
    ) -> ToolResult:
        """git push REMOTE [BRANCH]"""
        refspec = [branch] if branch else []
        return self.run("push", remote, *refspec, cwd=cwd, check=check)
