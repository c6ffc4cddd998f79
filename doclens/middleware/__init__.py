"""Middleware components for request validation, protection and error rendering."""

from doclens.middleware.errors import envelope, register_exception_handlers
from doclens.middleware.rate_limit import limiter, rate_limit_external
from doclens.middleware.size_limit import RequestSizeLimitMiddleware

__all__ = [
    "RequestSizeLimitMiddleware",
    "envelope",
    "limiter",
    "rate_limit_external",
    "register_exception_handlers",
]
