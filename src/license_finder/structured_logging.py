"""
Structured logging configuration for license-finder.

Emits one JSON object per event so dependency tracking runs can be audited
(what was added, what was dropped, which approvals were reset).
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

_RESERVED_RECORD_KEYS = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "getMessage",
    "exc_info",
    "exc_text",
    "stack_info",
    "taskName",
}


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "component": getattr(record, "component", record.name),
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_KEYS:
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


class TrackerLogger:
    """Structured logger for dependency tracking events."""

    def __init__(self, name: str):
        self.logger = logging.getLogger(f"license_finder.{name}")
        self._setup_logger()

    def _setup_logger(self) -> None:
        if not self.logger.handlers:
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(StructuredFormatter())
            self.logger.addHandler(handler)
            self.logger.setLevel(logging.WARNING)
        # Events go to this handler only, never to the parent error log
        self.logger.propagate = False

    def _log(self, level: str, event_type: str, **kwargs) -> None:
        getattr(self.logger, level)(event_type, extra={"event_type": event_type, **kwargs})

    def info(self, event_type: str, **kwargs) -> None:
        self._log("info", event_type, **kwargs)

    def warning(self, event_type: str, **kwargs) -> None:
        self._log("warning", event_type, **kwargs)


_dependencies_logger = TrackerLogger("dependencies")
_merge_logger = TrackerLogger("merge")


def get_dependencies_logger() -> TrackerLogger:
    """Get the logger for list construction and serialization."""
    return _dependencies_logger


def get_merge_logger() -> TrackerLogger:
    """Get the logger for list reconciliation."""
    return _merge_logger


def log_list_built(origin: str, total_dependencies: int, **kwargs) -> None:
    """Log that a dependency list was constructed."""
    get_dependencies_logger().info(
        "dependency_list_built",
        origin=origin,
        total_dependencies=total_dependencies,
        **kwargs,
    )


def log_dependency_added(name: str, version: Optional[str]) -> None:
    get_merge_logger().info("dependency_added", package_name=name, version=version)


def log_dependency_removed(name: str, source: Optional[str]) -> None:
    get_merge_logger().info("dependency_removed", package_name=name, source=source)


def log_approval_reset(
    name: str, old_license: Optional[str], new_license: Optional[str]
) -> None:
    """Log that a license change revoked a previous approval."""
    get_merge_logger().warning(
        "approval_reset",
        package_name=name,
        old_license=old_license,
        new_license=new_license,
    )


def log_merge_complete(
    total_dependencies: int, added: int, removed: int, retained: int
) -> None:
    """Log merge completion event."""
    get_merge_logger().info(
        "merge_completed",
        total_dependencies=total_dependencies,
        added=added,
        removed=removed,
        retained_unmanaged=retained,
    )


def configure_logging(log_level: str = "WARNING", enable_json: bool = True) -> None:
    """Configure logging for the application."""
    level = getattr(logging, log_level.upper(), logging.WARNING)
    formatter = (
        StructuredFormatter()
        if enable_json
        else logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )

    for logger in (_dependencies_logger, _merge_logger):
        logger.logger.setLevel(level)
        for handler in logger.logger.handlers:
            handler.setFormatter(formatter)
