"""Error classes for the CRUD error taxonomy.

Error Types:
- ValidationError: Rule set rejected the input (422)
- EmptyPayloadError: store/update called with no usable fields (422)
- MalformedPayloadError: Request body could not be decoded (400)
- InvalidQueryError: Query parameter outside the configured allow-lists (400)
- NotFoundError: Record absent (404)
- UnsupportedOperationError: Soft-delete operation on a model without
  soft-delete support (400)
- PersistenceError: Record store failure (500)

Usage:
    from autocrud.core.errors import ValidationError
    from autocrud.core.enums import ErrorCode
    from autocrud.core.result import Failure

    return Failure(error=ValidationError(
        code=ErrorCode.VALIDATION_FAILED,
        message="The given data was invalid.",
        errors={"title": ["The title field is required."]},
    ))
"""

from dataclasses import dataclass, field

from autocrud.core.enums import ErrorCode
from autocrud.core.errors.domain_error import DomainError


@dataclass(frozen=True, slots=True, kw_only=True)
class ValidationError(DomainError):
    """Input validation failure.

    Attributes:
        errors: Field name mapped to the list of messages for that field.
    """

    code: ErrorCode = ErrorCode.VALIDATION_FAILED
    message: str = "The given data was invalid."
    errors: dict[str, list[str]] = field(default_factory=dict)


@dataclass(frozen=True, slots=True, kw_only=True)
class EmptyPayloadError(DomainError):
    """No fields left after stripping framework-reserved input."""

    code: ErrorCode = ErrorCode.EMPTY_PAYLOAD
    message: str = "No data provided"


@dataclass(frozen=True, slots=True, kw_only=True)
class MalformedPayloadError(DomainError):
    """Request body that cannot be decoded (e.g. invalid JSON)."""

    code: ErrorCode = ErrorCode.MALFORMED_PAYLOAD
    message: str = "Malformed request body"


@dataclass(frozen=True, slots=True, kw_only=True)
class InvalidQueryError(DomainError):
    """Query parameter not permitted by the configured allow-lists.

    Attributes:
        parameter: Offending parameter family (sort, filter, include, fields).
    """

    code: ErrorCode = ErrorCode.INVALID_QUERY
    parameter: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class NotFoundError(DomainError):
    """Record not found.

    Attributes:
        resource_type: Resource name (e.g. "post").
        resource_id: Identifier that was looked up.
    """

    code: ErrorCode = ErrorCode.RESOURCE_NOT_FOUND
    message: str = "Not found"
    resource_type: str | None = None
    resource_id: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class UnsupportedOperationError(DomainError):
    """Soft-delete lifecycle operation on a model that cannot soft delete."""

    code: ErrorCode = ErrorCode.OPERATION_UNSUPPORTED
    message: str = "Soft deletes not enabled for this model"
    resource_type: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class PersistenceError(DomainError):
    """Record store failure (constraint violation, connection loss, ...).

    The driver message travels in ``details["error"]``.
    """

    code: ErrorCode = ErrorCode.PERSISTENCE_FAILED
