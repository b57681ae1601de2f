"""Machine-readable error codes.

Used with Result types for railway-oriented programming. Every DomainError
carries one of these codes; the presentation layer maps codes to HTTP status.
"""

from enum import Enum


class ErrorCode(Enum):
    """Error codes (machine-readable)."""

    # Validation errors
    VALIDATION_FAILED = "validation_failed"
    EMPTY_PAYLOAD = "empty_payload"
    MALFORMED_PAYLOAD = "malformed_payload"
    INVALID_QUERY = "invalid_query"

    # Resource errors
    RESOURCE_NOT_FOUND = "resource_not_found"

    # Capability errors
    OPERATION_UNSUPPORTED = "operation_unsupported"

    # Storage errors
    PERSISTENCE_FAILED = "persistence_failed"

    # File handling errors
    FILE_INVALID = "file_invalid"
