"""
PatchworkLogger - Structured logging for patchwork.

Call sites pass structured fields as keyword arguments; the fields of the
active ContextScope (run, repository, branch) are merged in underneath
them before the record reaches the standard library handlers.
"""

import logging
import os
import sys
from abc import ABC, abstractmethod
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from .context import get_current_context
from .formatters import ConsoleFormatter, JsonFormatter


LOG_LEVEL_ENV = "PATCHWORK_LOG_LEVEL"
LOG_FORMAT_ENV = "PATCHWORK_LOG_FORMAT"


def _resolve_level(level: int | str) -> int:
    return level if isinstance(level, int) else getattr(logging, level.upper())


def _stderr_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    if os.environ.get(LOG_FORMAT_ENV, "").lower() == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(ConsoleFormatter())
    return handler


class _LevelMethods(ABC):
    """debug() ... exception() on top of a single _emit()."""

    @abstractmethod
    def _emit(self, level: int, msg: str, args: tuple, fields: dict[str, Any], exc_info: Any = None) -> None: ...

    def debug(self, msg: str, *args: Any, **fields: Any) -> None:
        self._emit(logging.DEBUG, msg, args, fields)

    def info(self, msg: str, *args: Any, **fields: Any) -> None:
        self._emit(logging.INFO, msg, args, fields)

    def warning(self, msg: str, *args: Any, **fields: Any) -> None:
        self._emit(logging.WARNING, msg, args, fields)

    def error(self, msg: str, *args: Any, exc_info: Any = None, **fields: Any) -> None:
        self._emit(logging.ERROR, msg, args, fields, exc_info)

    def critical(self, msg: str, *args: Any, exc_info: Any = None, **fields: Any) -> None:
        self._emit(logging.CRITICAL, msg, args, fields, exc_info)

    def exception(self, msg: str, *args: Any, **fields: Any) -> None:
        """Log at ERROR with the traceback of the exception being handled."""
        self._emit(logging.ERROR, msg, args, fields, True)

    @abstractmethod
    def with_context(self, **fields: Any) -> "BoundLogger":
        """Return a logger that adds ``fields`` to every call.

        Usage:
            log = logger.with_context(step="push")
            log.error("Could not run git", error="...")
        """


class PatchworkLogger(_LevelMethods):
    """Structured logger for patchwork components.

    Console output goes to stderr; stdout carries only the per-repository
    result lines.

    Usage:
        from patchwork_logging import get_logger

        logger = get_logger("patchwork.monitor")
        logger.info("Build not finished", lifecycle="running", polls=3)
    """

    def __init__(self, name: str, level: int | str | None = None):
        """Initialize the logger.

        Args:
            name: Dotted logger name, e.g. "patchwork.preparer"
            level: Log level (defaults to $PATCHWORK_LOG_LEVEL, then INFO)
        """
        self.name = name
        self._logger = logging.getLogger(name)
        self._logger.setLevel(_resolve_level(level or os.environ.get(LOG_LEVEL_ENV, "INFO")))
        self._logger.propagate = False

    def _emit(self, level: int, msg: str, args: tuple, fields: dict[str, Any], exc_info: Any = None) -> None:
        if not self._logger.handlers:
            self._logger.addHandler(_stderr_handler())

        extra: dict[str, Any] = {}
        ctx = get_current_context()
        if ctx is not None:
            extra.update(ctx.to_dict())
            extra.update(ctx.extra)
        extra.update(fields)

        self._logger.log(level, msg, *args, exc_info=exc_info, extra=extra)

    def setLevel(self, level: int | str) -> None:
        self._logger.setLevel(_resolve_level(level))

    def with_context(self, **fields: Any) -> "BoundLogger":
        return BoundLogger(self, fields)

    def add_file_handler(
        self,
        log_file: str | Path,
        level: int = logging.DEBUG,
        max_bytes: int = 10 * 1024 * 1024,
        backup_count: int = 5,
    ) -> None:
        """Also write JSON lines to a rotating ``log_file`` (~ is expanded)."""
        if not self._logger.handlers:
            self._logger.addHandler(_stderr_handler())

        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)

        handler = RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count)
        handler.setLevel(level)
        handler.setFormatter(JsonFormatter())
        self._logger.addHandler(handler)


class BoundLogger(_LevelMethods):
    """A PatchworkLogger with fixed fields; call-site fields take precedence."""

    def __init__(self, parent: PatchworkLogger, fields: dict[str, Any]):
        self._parent = parent
        self._fields = fields

    def _emit(self, level: int, msg: str, args: tuple, fields: dict[str, Any], exc_info: Any = None) -> None:
        self._parent._emit(level, msg, args, {**self._fields, **fields}, exc_info)

    def with_context(self, **fields: Any) -> "BoundLogger":
        return BoundLogger(self._parent, {**self._fields, **fields})


_loggers: dict[str, PatchworkLogger] = {}


def get_logger(name: str, level: int | str | None = None) -> PatchworkLogger:
    """Return the cached logger for ``name``, creating it on first use.

    Passing ``level`` for an existing logger changes its level.
    """
    logger = _loggers.get(name)
    if logger is None:
        logger = _loggers[name] = PatchworkLogger(name, level)
    elif level is not None:
        logger.setLevel(level)
    return logger


def configure_root_logging(level: int | str = logging.WARNING, json_format: bool = False) -> None:
    """Route third-party loggers (requests, urllib3) to stderr at ``level``."""
    root = logging.getLogger()
    root.setLevel(_resolve_level(level))
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter(service="root") if json_format else ConsoleFormatter())
    root.addHandler(handler)
