"""
Catch-all exception handler.

Anything that escapes a route without being a domain error is logged with its
traceback and request details, tagged with a short error id, and answered
with a generic 500 body that carries the same id.
"""

import traceback
import uuid
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from level.core.errors import LevelError
from level.core.logging_config import get_logger
from level.core.monitoring import log_error

from .domain_handler import domain_exception_handler

logger = get_logger(__name__)


def _request_details(request: Request) -> Dict[str, Any]:
    return {
        "method": request.method,
        "path": request.url.path,
        "query_params": dict(request.query_params),
        "client": request.client.host if request.client else "unknown",
    }


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Turn an unexpected exception into a 500 response.

    Args:
        request: Request being served when ``exc`` was raised
        exc: The unhandled exception

    Returns:
        ``{"detail", "error_id", "error_type"}`` with status 500
    """
    error_id = uuid.uuid4().hex[:12]
    error_type = type(exc).__name__
    details = _request_details(request)

    logger.error(
        f"Unhandled exception [{error_id}] in {details['method']} {details['path']}: {exc}",
        exc_info=True,
        extra={**details, "error_id": error_id, "error_type": error_type, "traceback": traceback.format_exc()},
    )
    log_error(error_type, str(exc), {"error_id": error_id, "path": details["path"]})

    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "error_id": error_id, "error_type": error_type},
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register the domain and catch-all handlers on ``app``."""
    app.add_exception_handler(LevelError, domain_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
    logger.debug("Exception handlers registered")
