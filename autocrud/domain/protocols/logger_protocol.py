"""LoggerProtocol definition for structured logging.

Backend-agnostic structured logging interface. Log calls are a message plus
key-value context; never log request payload values wholesale (they may
carry credentials or file contents).

Usage:
    from autocrud.core.container import get_logger

    logger = get_logger()
    logger.info("crud_routes_registered", resource="posts", group="api")

    request_logger = logger.bind(trace_id=trace_id)
    request_logger.warning("validation_failed", fields=["title"])
"""

from __future__ import annotations

from typing import Any, Protocol


class LoggerProtocol(Protocol):
    """Protocol for structured logging adapters."""

    def debug(self, message: str, /, **context: Any) -> None:
        """Log a debug-level message."""
        ...

    def info(self, message: str, /, **context: Any) -> None:
        """Log an info-level message."""
        ...

    def warning(self, message: str, /, **context: Any) -> None:
        """Log a warning-level message."""
        ...

    def error(
        self, message: str, /, *, error: Exception | None = None, **context: Any
    ) -> None:
        """Log an error-level message with optional exception details.

        Args:
            message: Event name or short message.
            error: Optional exception; implementations add error_type and
                error_message fields.
            **context: Structured key-value context fields.
        """
        ...

    def critical(
        self, message: str, /, *, error: Exception | None = None, **context: Any
    ) -> None:
        """Log a critical-level message."""
        ...

    def bind(self, **context: Any) -> LoggerProtocol:
        """Return new logger with permanently bound context.

        The original logger remains unchanged.
        """
        ...
