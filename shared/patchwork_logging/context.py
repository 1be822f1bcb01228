"""
Log correlation context.

A run id plus the repository and branch being worked on are attached to
every log line emitted inside a ContextScope. Context lives in a
ContextVar, so worker threads start empty and monitors open their own
scope with the run id handed to them.
"""

import secrets
from contextvars import ContextVar
from dataclasses import dataclass, field, replace
from typing import Any


_current_context: ContextVar["LogContext | None"] = ContextVar("patchwork_log_context", default=None)


@dataclass
class LogContext:
    """Fields shared by the log lines of one unit of work.

    Attributes:
        run_id: Identifier of one apply run (16 hex chars, generated when omitted)
        repository: owner/repo
        branch: Branch being created and monitored
        extra: Any further fields to attach
    """

    run_id: str | None = None
    repository: str | None = None
    branch: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.run_id is None:
            self.run_id = secrets.token_hex(8)

    def with_extra(self, **fields: Any) -> "LogContext":
        """Copy of this context with ``fields`` added to extra."""
        return replace(self, extra={**self.extra, **fields})

    def to_dict(self) -> dict[str, Any]:
        return {
            name: value
            for name, value in (("run_id", self.run_id), ("repository", self.repository), ("branch", self.branch))
            if value
        }


def get_current_context() -> LogContext | None:
    return _current_context.get()


def set_current_context(ctx: LogContext | None) -> None:
    _current_context.set(ctx)


def get_or_create_context() -> LogContext:
    """Return the active context, installing a fresh one if there is none."""
    ctx = _current_context.get()
    if ctx is None:
        ctx = LogContext()
        _current_context.set(ctx)
    return ctx


class ContextScope:
    """Install a LogContext for the duration of a ``with`` block.

    Unset fields fall back to the enclosing scope, so a repository scope
    opened inside a run scope keeps the run id and branch.

    Usage:
        with ContextScope(run_id=run_id, branch="fix-lint"):
            with ContextScope(repository="acme/api"):
                logger.info("Cloning")  # run_id, repository and branch attached
    """

    def __init__(self, run_id: str | None = None, repository: str | None = None, branch: str | None = None, **extra: Any):
        self._fields = {"run_id": run_id, "repository": repository, "branch": branch}
        self._extra = extra
        self._token = None

    def __enter__(self) -> LogContext:
        parent = _current_context.get() or LogContext(run_id="")
        given = {name: value for name, value in self._fields.items() if value}
        ctx = replace(parent, **given, extra={**parent.extra, **self._extra})
        if not ctx.run_id:
            ctx.run_id = secrets.token_hex(8)
        self._token = _current_context.set(ctx)
        return ctx

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        _current_context.reset(self._token)
