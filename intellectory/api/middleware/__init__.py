"""API middleware."""

from intellectory.api.middleware.error_handler import ErrorHandlerMiddleware
from intellectory.api.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware", "ErrorHandlerMiddleware"]
