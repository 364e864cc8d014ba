"""
Error handling for the license-finder dependency core.

Faults in dependency data and problems with the configuration are reported
through one handler. It counts them, writes them to the ``license_finder``
log and hands them to any registered callbacks. Data faults are then raised
as DependencyDataError.
"""

import logging
import sys
import traceback
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional


class ErrorLevel(Enum):
    """Severity of a reported problem."""

    WARNING = "WARNING"
    ERROR = "ERROR"


class ErrorCategory(Enum):
    """Where a problem came from."""

    SERIALIZATION = "SERIALIZATION"
    VALIDATION = "VALIDATION"
    MERGE = "MERGE"
    CONFIGURATION = "CONFIGURATION"


class DependencyDataError(ValueError):
    """A dependency record is missing data the core cannot invent."""


@dataclass
class ErrorContext:
    """One reported problem, as passed to callbacks."""

    level: ErrorLevel
    category: ErrorCategory
    message: str
    module: str
    function: str
    details: Dict[str, Any] = field(default_factory=dict)
    exception: Optional[Exception] = None
    traceback_info: Optional[str] = None
    suggestions: List[str] = field(default_factory=list)


class ErrorLogger:
    """Writes each problem as one plain-text log line."""

    def __init__(self, name: str, level: int = logging.WARNING):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)

        if not self.logger.handlers:
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(
                logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
            )
            self.logger.addHandler(handler)

    def log_error_context(self, context: ErrorContext) -> None:
        fields: Dict[str, Any] = {
            "category": context.category.value,
            "where": f"{context.module}.{context.function}",
        }
        if context.details:
            fields["details"] = context.details
        if context.exception:
            fields["exception"] = type(context.exception).__name__
        if context.suggestions:
            fields["suggestions"] = context.suggestions

        self.logger.log(
            getattr(logging, context.level.value), f"{context.message} | {fields}"
        )


ErrorCallback = Callable[[ErrorContext], None]


class ErrorHandler:
    """
    Central point for reporting problems.

    Callers can register callbacks, for example to collect every problem
    seen during a run, without wrapping each call site.
    """

    def __init__(
        self,
        logger_name: str = "license_finder",
        log_level: int = logging.WARNING,
        enable_callbacks: bool = True,
    ):
        self.logger = ErrorLogger(logger_name, log_level)
        self.enable_callbacks = enable_callbacks
        self.category_callbacks: Dict[ErrorCategory, List[ErrorCallback]] = {}
        self.global_callbacks: List[ErrorCallback] = []
        self.error_stats: Dict[str, int] = {}

    def register_callback(
        self, callback: ErrorCallback, category: Optional[ErrorCategory] = None
    ) -> None:
        """
        Register a callback for reported problems.

        Args:
            callback: Called with the ErrorContext of each problem
            category: Only call for this category; None for every problem
        """
        if not self.enable_callbacks:
            return

        if category is None:
            self.global_callbacks.append(callback)
        else:
            self.category_callbacks.setdefault(category, []).append(callback)

    def handle_error(
        self,
        level: ErrorLevel,
        category: ErrorCategory,
        message: str,
        module: str,
        function: str,
        exception: Optional[Exception] = None,
        details: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ) -> ErrorContext:
        """
        Count, log and dispatch one problem.

        Returns:
            ErrorContext: The context handed to callbacks
        """
        context = ErrorContext(
            level=level,
            category=category,
            message=message,
            module=module,
            function=function,
            details=details or {},
            exception=exception,
            traceback_info=traceback.format_exc() if exception else None,
            suggestions=suggestions or [],
        )

        stat_key = f"{category.value}_{level.value}"
        self.error_stats[stat_key] = self.error_stats.get(stat_key, 0) + 1

        self.logger.log_error_context(context)

        if self.enable_callbacks:
            callbacks = self.category_callbacks.get(category, []) + self.global_callbacks
            for callback in callbacks:
                try:
                    callback(context)
                except Exception as cb_error:
                    # Callback failures must not mask the original problem
                    self.logger.logger.error(f"Error in callback: {cb_error}")

        return context

    def warning(
        self, category: ErrorCategory, message: str, module: str, function: str, **kwargs
    ) -> ErrorContext:
        return self.handle_error(
            ErrorLevel.WARNING, category, message, module, function, **kwargs
        )

    def error(
        self, category: ErrorCategory, message: str, module: str, function: str, **kwargs
    ) -> ErrorContext:
        return self.handle_error(
            ErrorLevel.ERROR, category, message, module, function, **kwargs
        )

    def get_error_stats(self) -> Dict[str, int]:
        """Counts per ``<CATEGORY>_<LEVEL>`` key."""
        return self.error_stats.copy()


_global_error_handler: Optional[ErrorHandler] = None


def get_error_handler() -> ErrorHandler:
    """Return the process-wide error handler, creating it on first use."""
    global _global_error_handler
    if _global_error_handler is None:
        _global_error_handler = ErrorHandler()
    return _global_error_handler


def setup_error_handling(
    log_level: int = logging.WARNING,
    enable_callbacks: bool = True,
    logger_name: str = "license_finder",
) -> ErrorHandler:
    """Replace the process-wide error handler with a freshly configured one."""
    global _global_error_handler
    _global_error_handler = ErrorHandler(logger_name, log_level, enable_callbacks)
    return _global_error_handler


def raise_data_error(
    message: str,
    module: str,
    function: str,
    category: ErrorCategory = ErrorCategory.VALIDATION,
    details: Optional[Dict[str, Any]] = None,
    exception: Optional[Exception] = None,
) -> None:
    """
    Report a data-integrity fault and raise it.

    Raises:
        DependencyDataError: always
    """
    get_error_handler().error(
        category,
        message,
        module,
        function,
        details=details,
        exception=exception,
        suggestions=["Check the record or snapshot that produced this entry"],
    )
    raise DependencyDataError(message) from exception
