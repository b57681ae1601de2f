"""Global exception handlers for the FastAPI application.

Every exception that escapes a route is rendered as the error envelope of the
configured formatter, so nothing leaves the app as a raw server fault.

Handlers:
    http_exception_handler: HTTPException (404 for unknown routes, 405, ...)
    validation_exception_handler: FastAPI RequestValidationError
    generic_exception_handler: Catches all unhandled exceptions

Exports:
    register_exception_handlers: Register all exception handlers with FastAPI app
"""

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from autocrud.core.container import get_logger
from autocrud.domain.protocols import LoggerProtocol
from autocrud.presentation.formatters import EnvelopeFormatter, ResponseFormatter

_STATUS_DETAIL: dict[int, str] = {
    400: "Bad Request",
    404: "Not found",
    405: "Method Not Allowed",
    415: "Unsupported Media Type",
    422: "The given data was invalid.",
    500: "Server Error",
}


def _formatter(request: Request) -> ResponseFormatter:
    return getattr(request.app.state, "formatter", None) or EnvelopeFormatter()


def _logger(request: Request) -> LoggerProtocol:
    return getattr(request.app.state, "logger", None) or get_logger()


async def http_exception_handler(request: Request, exc: Exception) -> Response:
    """Convert HTTPException to the error envelope.

    Args:
        request: FastAPI Request object.
        exc: HTTPException raised by routing, a handler or a dependency.

    Returns:
        Error envelope with the exception's status code and headers.
    """
    # Type narrowing: registered only for Starlette's HTTPException
    assert isinstance(exc, StarletteHTTPException)

    detail = exc.detail if isinstance(exc.detail, str) else None
    message = detail or _STATUS_DETAIL.get(exc.status_code, "Error")
    response = _formatter(request).error(message, exc.status_code)

    headers = getattr(exc, "headers", None)
    if headers:
        response.headers.update(headers)
    return response


async def validation_exception_handler(request: Request, exc: Exception) -> Response:
    """Convert RequestValidationError to a 422 envelope with field errors.

    Example:
        >>> # GET /api/posts?page=abc
        >>> # {"errors": [{"status": "422", "detail": "...",
        >>> #   "meta": {"errors": {"query.page": ["Input should be ..."]}}}]}
    """
    # Type narrowing: registered only for RequestValidationError
    assert isinstance(exc, RequestValidationError)

    field_errors: dict[str, list[str]] = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", []) if part != "body"]
        field_name = ".".join(loc) if loc else "unknown"
        field_errors.setdefault(field_name, []).append(
            error.get("msg", "Validation failed")
        )

    return _formatter(request).error(
        _STATUS_DETAIL[422],
        422,
        field_errors or None,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle unexpected Python exceptions.

    Logs the exception with the trace id and returns a 500 envelope without
    leaking internals.
    """
    _logger(request).error(
        "unhandled_exception",
        error=exc,
        trace_id=getattr(request.state, "trace_id", None),
        request_path=request.url.path,
        request_method=request.method,
    )
    return _formatter(request).error(
        _STATUS_DETAIL[500], status.HTTP_500_INTERNAL_SERVER_ERROR
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application.

    Example:
        >>> app = FastAPI()
        >>> register_exception_handlers(app)
    """
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
