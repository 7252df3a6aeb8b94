"""
Error Handling Utilities for Matrix Rain

Provides the error taxonomy used across the renderer:
1. Categorized exceptions (configuration, environment, external renderer)
2. Detailed error logging with context and stack trace

Every error here ends the process; there are no retries.

USAGE:
    from matrix_rain.utils.error_handling import RainError, handle_error

    try:
        return RainApp(config).run()
    except RainError as e:
        handle_error(e, "matrix-rain")
"""

import logging
import sys
import threading
import traceback
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class ErrorCategory(Enum):
    """Categories of errors for proper handling and reporting."""
    # Bad flags or unusable referenced files
    CONFIG = "configuration"

    # Output is not a usable terminal
    ENVIRONMENT = "environment"

    # Image-to-text renderer failures
    EXTERNAL = "external"

    # Unknown/uncategorized
    UNKNOWN = "unknown"


class RainError(Exception):
    """Base class for all renderer errors."""
    category = ErrorCategory.UNKNOWN
    exit_code = 1


class ConfigurationError(RainError):
    """A flag combination or a referenced file is invalid."""
    category = ErrorCategory.CONFIG


class TerminalUnavailableError(RainError):
    """Output is not an interactive text terminal."""
    category = ErrorCategory.ENVIRONMENT


class MaskRenderError(RainError):
    """The external image-to-text renderer failed to build a mask."""
    category = ErrorCategory.EXTERNAL


@dataclass
class ErrorContext:
    """Detailed context information for an error."""
    error: Exception
    category: ErrorCategory
    operation: str
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    thread_name: str = field(default_factory=lambda: threading.current_thread().name)
    stack_trace: str = ""
    platform: str = field(default_factory=lambda: sys.platform)

    def __post_init__(self):
        if not self.stack_trace:
            self.stack_trace = traceback.format_exc()

    def format_log_message(self) -> str:
        """Format a detailed log message."""
        lines = [
            f"ERROR in {self.operation}",
            f"  Category: {self.category.value}",
            f"  Type: {type(self.error).__name__}",
            f"  Message: {self.error}",
            f"  Thread: {self.thread_name}",
            f"  Platform: {self.platform}",
            f"  Timestamp: {self.timestamp}",
            "  Stack Trace:",
        ]
        for line in self.stack_trace.split('\n'):
            if line.strip():
                lines.append(f"    {line}")

        return '\n'.join(lines)


def handle_error(
    error: Exception,
    operation: str,
    category: Optional[ErrorCategory] = None,
) -> ErrorContext:
    """
    Log a fatal error with its full context.

    Args:
        error: The exception that occurred
        operation: Name of the operation that failed
        category: Category of the error (taken from a RainError if not provided)

    Returns:
        ErrorContext with full error details
    """
    if category is None:
        category = getattr(error, 'category', ErrorCategory.UNKNOWN)

    context = ErrorContext(
        error=error,
        category=category,
        operation=operation,
    )
    logger.critical(context.format_log_message())
    return context
