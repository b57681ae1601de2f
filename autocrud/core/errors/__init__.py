"""Core errors package.

Usage:
    from autocrud.core.errors import DomainError, ValidationError, NotFoundError
"""

from autocrud.core.errors.common_errors import (
    EmptyPayloadError,
    InvalidQueryError,
    MalformedPayloadError,
    NotFoundError,
    PersistenceError,
    UnsupportedOperationError,
    ValidationError,
)
from autocrud.core.errors.configuration_error import ConfigurationError
from autocrud.core.errors.domain_error import DomainError

__all__ = [
    "ConfigurationError",
    "DomainError",
    "EmptyPayloadError",
    "InvalidQueryError",
    "MalformedPayloadError",
    "NotFoundError",
    "PersistenceError",
    "UnsupportedOperationError",
    "ValidationError",
]
