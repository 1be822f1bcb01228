"""
Base classes for logged command-line tool wrappers.
"""

import subprocess
import time
from dataclasses import dataclass, field
from typing import Any

from ..logger import get_logger


logger = get_logger("patchwork.exec")


@dataclass
class ToolResult:
    """Outcome of one external command.

    stdout and stderr are captured into a single interleaved stream, which
    is what an operator needs to see when a command fails.

    Attributes:
        command: Full argv that was executed
        exit_code: Process return code
        output: Combined stdout/stderr
        duration_ms: Wall-clock duration in milliseconds
        cwd: Working directory the command ran in
        extra: Wrapper-specific parsed values
    """

    command: list[str]
    exit_code: int
    output: str
    duration_ms: float
    cwd: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return self.exit_code == 0

    def check(self) -> "ToolResult":
        """Return self, or raise CalledProcessError if the command failed."""
        if not self.success:
            raise subprocess.CalledProcessError(self.exit_code, self.command, output=self.output)
        return self


class ToolWrapper:
    """Runs a command-line tool in a fixed working directory and logs it.

    Subclasses set ``tool_name`` and add typed helpers on top of ``run``.
    """

    tool_name: str = ""

    def run(
        self,
        *args: str,
        cwd: str | None = None,
        check: bool = False,
        timeout: float | None = None,
    ) -> ToolResult:
        """Run ``tool_name`` with args.

        Args:
            *args: Arguments appended after the tool name
            cwd: Working directory for the process
            check: Raise CalledProcessError on nonzero exit
            timeout: Seconds before the process is killed

        Returns:
            ToolResult with combined output

        Raises:
            subprocess.CalledProcessError: If check is True and the command fails
            subprocess.TimeoutExpired: If the timeout elapses
            FileNotFoundError: If the tool is not installed
        """
        command = [self.tool_name, *args]
        start = time.monotonic()
        proc = subprocess.run(
            command,
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            timeout=timeout,
            check=False,
        )
        duration_ms = (time.monotonic() - start) * 1000

        result = ToolResult(
            command=command,
            exit_code=proc.returncode,
            output=proc.stdout or "",
            duration_ms=round(duration_ms, 1),
            cwd=cwd,
        )

        if result.success:
            logger.debug(
                f"{self.tool_name} {args[0] if args else ''} completed",
                command=" ".join(command),
                duration_ms=result.duration_ms,
            )
        else:
            logger.error(
                f"Could not run {' '.join(command)}",
                exit_code=result.exit_code,
                cwd=cwd,
                output=result.output.strip(),
            )

        if check:
            result.check()
        return result
