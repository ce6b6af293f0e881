"""
Middleware modules for the Level server.

This package contains custom middleware for request timing and logging.
"""

from .request_logging import RequestLoggingMiddleware

__all__ = ["RequestLoggingMiddleware"]
