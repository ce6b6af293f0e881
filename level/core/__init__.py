"""
Core utilities and configuration for Level.

This package provides core functionality including logging configuration,
error types, monitoring, the database layer and shared models.
"""

from level.core.logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
