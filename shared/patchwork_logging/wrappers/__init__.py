"""
Tool wrappers for patchwork_logging.

Wrapped versions of the command-line tools patchwork shells out to. Every
invocation is logged with timing, and failures log the combined output.

Usage:
    from patchwork_logging.wrappers import git

    # Instead of subprocess.run(["git", "push", "origin", "fix-lint"], cwd=workspace)
    result = git.push("origin", "fix-lint", cwd=workspace, check=True)
"""

from .base import ToolResult, ToolWrapper
from .git import GitWrapper

# Singleton wrapper instance
git = GitWrapper()

__all__ = [
    "GitWrapper",
    "ToolResult",
    "ToolWrapper",
    "git",
]
