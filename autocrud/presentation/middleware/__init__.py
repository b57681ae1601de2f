"""HTTP middleware."""

from autocrud.presentation.middleware.method_override import MethodOverrideMiddleware
from autocrud.presentation.middleware.trace_middleware import TraceMiddleware

__all__ = ["MethodOverrideMiddleware", "TraceMiddleware"]
