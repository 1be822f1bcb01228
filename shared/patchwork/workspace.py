"""Temporary, exclusively-owned working directories."""

import shutil
import tempfile
from pathlib import Path
from typing import Any

from patchwork_logging import get_logger

from .errors import WorkspaceError


logger = get_logger("patchwork.workspace")


class Workspace:
    """A fresh temporary directory for one repository.

    The directory name is prefixed with the repository's numeric id and
    randomised by mkdtemp, so two workspaces never collide. It is removed
    when the ``with`` block exits, including on errors; removal failures
    are ignored.

    Usage:
        with Workspace(prefix=str(metadata.id)) as path:
            git.clone(metadata.ssh_url, str(path), cwd=str(path), check=True)
    """

    def __init__(self, prefix: str = "", root: str | Path | None = None):
        self.prefix = prefix
        self.root = str(root) if root is not None else None
        self.path: Path | None = None

    def __enter__(self) -> Path:
        try:
            self.path = Path(tempfile.mkdtemp(prefix=self.prefix, dir=self.root))
        except OSError as e:
            raise WorkspaceError(f"could not create temporary directory: {e}") from e
        logger.debug("Created workspace", path=str(self.path))
        return self.path

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.cleanup()

    def cleanup(self) -> None:
        if self.path is None:
            return
        shutil.rmtree(self.path, ignore_errors=True)
        logger.debug("Removed workspace", path=str(self.path))
        self.path = None
