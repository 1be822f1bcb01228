"""Transformations backed by external commands, for use from the CLI."""

import os
import subprocess
from pathlib import Path

from patchwork_logging import get_logger

from .models import RepositoryMetadata
from .preparer import PatchFunc


logger = get_logger("patchwork.transform")


class TransformError(RuntimeError):
    """The transformation command exited nonzero."""


def command_patch(command: str | list[str], *, shell: bool = False, timeout: float | None = None) -> PatchFunc:
    """Build a patch function that runs ``command`` inside the workspace.

    The command runs with the workspace as its working directory and these
    extra environment variables:
        PATCHWORK_REPO       owner/repo
        PATCHWORK_REPO_ID    numeric repository id
        PATCHWORK_WORKSPACE  absolute workspace path

    Args:
        command: Shell string (with shell=True) or argv list
        shell: Run through the shell
        timeout: Seconds before the command is killed

    Returns:
        A callable raising TransformError on nonzero exit
    """

    def patch(metadata: RepositoryMetadata, workspace: Path) -> None:
        env = dict(os.environ)
        env.update(
            {
                "PATCHWORK_REPO": metadata.full_name,
                "PATCHWORK_REPO_ID": str(metadata.id),
                "PATCHWORK_WORKSPACE": str(Path(workspace).resolve()),
            }
        )
        proc = subprocess.run(
            command,
            cwd=str(workspace),
            env=env,
            shell=shell,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            timeout=timeout,
            check=False,
        )
        if proc.stdout:
            logger.debug("Transformation output", output=proc.stdout.strip())
        if proc.returncode != 0:
            raise TransformError(f"transformation exited {proc.returncode}: {(proc.stdout or '').strip()[-2000:]}")

    return patch


def script_patch(script: str | Path, *, timeout: float | None = None) -> PatchFunc:
    """Build a patch function that runs an executable script in the workspace."""
    return command_patch([str(Path(script).expanduser().resolve())], timeout=timeout)
