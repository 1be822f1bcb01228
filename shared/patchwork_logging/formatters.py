"""
Log formatters for patchwork_logging.

JsonFormatter writes one object per line for log files; ConsoleFormatter
writes the human-readable lines shown on stderr.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any


# Rendered as context, never as free-form extra fields
CONTEXT_FIELDS = ("run_id", "repository", "branch")

# Attributes every LogRecord carries
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


def extract_extra(record: logging.LogRecord) -> dict[str, Any]:
    """Return the keyword fields passed at the call site."""
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _RECORD_ATTRS and key not in CONTEXT_FIELDS and not key.startswith("_")
    }


def _context(record: logging.LogRecord) -> dict[str, Any]:
    return {name: getattr(record, name) for name in CONTEXT_FIELDS if getattr(record, name, None)}


class JsonFormatter(logging.Formatter):
    """One JSON object per line.

    Example:
        {"timestamp": "2025-11-28T12:34:56.789Z", "severity": "ERROR",
         "message": "Could not run git", "service": "patchwork",
         "logger": "patchwork.preparer",
         "context": {"run_id": "9f2c41d07ab3e815", "repository": "acme/api"},
         "extra": {"step": "push"},
         "sourceLocation": {"file": "...", "line": 104, "function": "_git"}}
    """

    def __init__(self, service: str = "patchwork", include_extra: bool = True):
        super().__init__()
        self.service = service
        self.include_extra = include_extra

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: dict[str, Any] = {
            "timestamp": created.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "severity": record.levelname,
            "message": record.getMessage(),
            "service": self.service,
        }
        if record.name != self.service:
            entry["logger"] = record.name

        context = _context(record)
        if context:
            entry["context"] = context

        extra = extract_extra(record) if self.include_extra else {}
        if extra:
            entry["extra"] = extra

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        # Warnings and above point back at the call site
        if record.levelno >= logging.WARNING:
            entry["sourceLocation"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        return json.dumps(entry, default=str, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    """Single-line console output.

    Example:
        2025-11-28 12:34:56 [INFO    ] patchwork.preparer: Pushed branch (repo=acme/api branch=fix-lint) repo_id=1296269
    """

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"
    DIM = "\033[90m"

    def __init__(self, use_colors: bool | None = None, show_context: bool = True, show_extra: bool = True):
        """
        Args:
            use_colors: ANSI colours; None enables them when stderr is a TTY and NO_COLOR is unset
            show_context: Append "(repo=... branch=...)"
            show_extra: Append call-site fields as key=value
        """
        super().__init__()
        if use_colors is None:
            use_colors = sys.stderr.isatty() and not os.environ.get("NO_COLOR")
        self.use_colors = use_colors
        self.show_context = show_context
        self.show_extra = show_extra

    def _paint(self, text: str, color: str) -> str:
        return f"{color}{text}{self.RESET}" if self.use_colors else text

    def format(self, record: logging.LogRecord) -> str:
        level = self._paint(f"{record.levelname:8}", self.LEVEL_COLORS.get(record.levelname, ""))
        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        parts = [f"{timestamp} [{level}] {record.name}: {record.getMessage()}"]

        if self.show_context:
            context = _context(record)
            labels = [f"repo={context['repository']}"] if "repository" in context else []
            if "branch" in context:
                labels.append(f"branch={context['branch']}")
            if labels:
                parts.append(self._paint(f"({' '.join(labels)})", self.DIM))

        if self.show_extra:
            extra = extract_extra(record)
            if extra:
                parts.append(self._paint(" ".join(f"{key}={value}" for key, value in extra.items()), self.DIM))

        line = " ".join(parts)
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line
