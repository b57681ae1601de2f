"""Error response builder.

Maps DomainError codes to HTTP status codes and renders them through the
configured ResponseFormatter as ``{"errors": [{status, detail, meta?}]}``.

Exports:
    ErrorResponseBuilder: Utility class for building error envelopes
"""

from typing import Any

from fastapi import status
from starlette.responses import Response

from autocrud.core.enums import ErrorCode
from autocrud.core.errors import DomainError, ValidationError
from autocrud.presentation.formatters import ResponseFormatter


class ErrorResponseBuilder:
    """Build error envelopes from domain errors.

    Example:
        >>> error = NotFoundError(resource_type="post", resource_id="9")
        >>> response = ErrorResponseBuilder.from_domain_error(error, formatter)
        >>> response.status_code
        404
    """

    @staticmethod
    def from_domain_error(error: DomainError, formatter: ResponseFormatter) -> Response:
        """Convert a DomainError to an error response.

        Args:
            error: Domain error to convert.
            formatter: Formatter producing the envelope.

        Returns:
            Response with the mapped status code.
        """
        return formatter.error(
            error.message,
            ErrorResponseBuilder.get_status_code(error.code),
            ErrorResponseBuilder.get_meta_errors(error),
        )

    @staticmethod
    def get_status_code(code: ErrorCode) -> int:
        """Map error code to HTTP status code.

        Example:
            >>> ErrorResponseBuilder.get_status_code(ErrorCode.RESOURCE_NOT_FOUND)
            404
        """
        mapping = {
            ErrorCode.VALIDATION_FAILED: 422,
            ErrorCode.EMPTY_PAYLOAD: 422,
            ErrorCode.FILE_INVALID: 422,
            ErrorCode.MALFORMED_PAYLOAD: status.HTTP_400_BAD_REQUEST,
            ErrorCode.INVALID_QUERY: status.HTTP_400_BAD_REQUEST,
            ErrorCode.OPERATION_UNSUPPORTED: status.HTTP_400_BAD_REQUEST,
            ErrorCode.RESOURCE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
            ErrorCode.PERSISTENCE_FAILED: status.HTTP_500_INTERNAL_SERVER_ERROR,
        }
        return mapping.get(code, status.HTTP_500_INTERNAL_SERVER_ERROR)

    @staticmethod
    def get_meta_errors(error: DomainError) -> Any:
        """Value placed under ``meta.errors`` (None omits the meta block)."""
        if isinstance(error, ValidationError):
            return error.errors
        if error.details:
            return error.details.get("error", error.details)
        return None
