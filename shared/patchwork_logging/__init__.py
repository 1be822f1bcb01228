"""
patchwork_logging - Structured logging for patchwork.

Provides a unified logging interface with human-readable console output,
JSON file output and context propagation across preparation and monitoring.

Usage:
    from patchwork_logging import get_logger, ContextScope

    logger = get_logger("patchwork.preparer")

    # Simple logging
    logger.info("Cloned repository", repository="owner/repo")

    # With context scope (all logs in scope include context)
    with ContextScope(repository="owner/repo", branch="fix-lint"):
        logger.info("Pushing branch")

    # Bound logger (all logs include bound fields)
    bound = logger.with_context(step="clone")
    bound.info("Starting")

    # Tool wrappers
    from patchwork_logging.wrappers import git

    result = git.push("origin", "fix-lint", cwd="/tmp/1234abcd")
"""

from .context import (
    ContextScope,
    LogContext,
    get_current_context,
    get_or_create_context,
    set_current_context,
)
from .formatters import ConsoleFormatter, JsonFormatter
from .logger import BoundLogger, PatchworkLogger, configure_root_logging, get_logger


__all__ = [
    "BoundLogger",
    "ConsoleFormatter",
    "ContextScope",
    "JsonFormatter",
    "LogContext",
    "PatchworkLogger",
    "configure_root_logging",
    "get_current_context",
    "get_logger",
    "get_or_create_context",
    "set_current_context",
]

__version__ = "0.1.0"
