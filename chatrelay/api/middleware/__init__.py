"""
HTTP middleware.
"""

from chatrelay.api.middleware.logging_middleware import RequestLoggingMiddleware

__all__ = ["RequestLoggingMiddleware"]
