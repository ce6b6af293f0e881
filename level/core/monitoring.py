"""
Logfire integration.

When ``MONITORING__LOGFIRE_ENABLED`` is true and ``MONITORING__LOGFIRE_TOKEN``
is set, the FastAPI app and SQLAlchemy are instrumented and request and error
records are sent to Logfire. Without both settings every helper here does
nothing, so callers never need to check.
"""

from typing import Optional

import logfire
from fastapi import FastAPI

from level.core.logging_config import get_logger
from level.server.core.config import settings

logger = get_logger(__name__)

_logfire_configured = False


def initialize_logfire(app: Optional[FastAPI] = None) -> None:
    """
    Configure Logfire for this process.

    Args:
        app: Application to instrument; SQLAlchemy is instrumented either way
    """
    global _logfire_configured

    config = settings.monitoring
    if not config.logfire_enabled:
        logger.info("Logfire disabled (MONITORING__LOGFIRE_ENABLED is false)")
        return
    if not config.logfire_token:
        logger.warning("Logfire enabled without MONITORING__LOGFIRE_TOKEN; no traces will be sent")
        return

    try:
        logfire.configure(
            token=config.logfire_token,
            service_name=config.service_name,
            environment=config.environment,
        )
        logfire.instrument_sqlalchemy()
        if app is not None:
            logfire.instrument_fastapi(app=app)
    except Exception as e:
        logger.error(f"Could not initialize Logfire: {e}", exc_info=True)
        return

    _logfire_configured = True
    logger.info(f"Logfire ready for {config.service_name} ({config.environment})")


def log_api_request(method: str, path: str, status_code: int, duration_ms: float) -> None:
    if not _logfire_configured:
        return
    logfire.info(
        "{method} {path} -> {status_code}",
        method=method,
        path=path,
        status_code=status_code,
        duration_ms=duration_ms,
    )


def log_error(error_type: str, error_message: str, context: Optional[dict] = None) -> None:
    """Send an error record with ``context`` as attributes."""
    if not _logfire_configured:
        return
    logfire.error(f"{error_type}: {error_message}", **(context or {}))
