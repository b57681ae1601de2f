"""Base domain error class for Railway-Oriented Programming.

DomainError is the base class for every error the CRUD layer reports while
handling a request. Errors flow through the system as data (Result types),
not exceptions, and are converted to error envelopes at the controller
boundary.

Usage:
    from autocrud.core.errors import DomainError
    from autocrud.core.enums import ErrorCode

    @dataclass(frozen=True, slots=True, kw_only=True)
    class MyError(DomainError):
        pass  # Inherits code, message, details
"""

from dataclasses import dataclass
from typing import Any

from autocrud.core.enums import ErrorCode


@dataclass(frozen=True, slots=True, kw_only=True)
class DomainError:
    """Base domain error (does NOT inherit from Exception).

    Attributes:
        code: Machine-readable error code (enum).
        message: Human-readable error message.
        details: Optional context surfaced in the error envelope meta.
    """

    code: ErrorCode
    message: str
    details: dict[str, Any] | None = None

    def __str__(self) -> str:
        """String representation of error."""
        return f"{self.code.value}: {self.message}"
