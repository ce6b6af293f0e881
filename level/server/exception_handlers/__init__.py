"""
Exception handlers for the Level server.

This package contains the handlers translating domain errors and unhandled
exceptions into JSON responses, and a setup function registering them with the
FastAPI application.
"""

from .domain_handler import domain_exception_handler
from .global_handler import global_exception_handler, setup_exception_handlers

__all__ = ["domain_exception_handler", "global_exception_handler", "setup_exception_handlers"]
