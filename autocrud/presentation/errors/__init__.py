"""Error envelopes and global exception handlers.

Exports:
    ErrorResponseBuilder: Utility for building error envelopes
    register_exception_handlers: Register global exception handlers with FastAPI
"""

from autocrud.presentation.errors.error_response_builder import ErrorResponseBuilder
from autocrud.presentation.errors.exception_handlers import (
    register_exception_handlers,
)

__all__ = ["ErrorResponseBuilder", "register_exception_handlers"]
