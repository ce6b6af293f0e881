"""
Domain error handler for REST routes.

GraphQL reports domain errors itself; on REST routes they become status codes:

- ``ValidationError`` -> 422 with ``{"errors": [{"attribute", "message"}]}``
- ``UnauthorizedError`` -> 401
- ``ForbiddenError`` -> 403
- ``NotFoundError`` -> 404
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse

from level.core.errors import ForbiddenError, LevelError, NotFoundError, UnauthorizedError, ValidationError
from level.core.logging_config import get_logger

logger = get_logger(__name__)

_STATUS_CODES = {
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    UnauthorizedError: status.HTTP_401_UNAUTHORIZED,
    ForbiddenError: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
}


async def domain_exception_handler(request: Request, exc: LevelError) -> JSONResponse:
    status_code = next(
        (code for error_type, code in _STATUS_CODES.items() if isinstance(exc, error_type)),
        status.HTTP_400_BAD_REQUEST,
    )
    logger.info(f"{type(exc).__name__} in {request.method} {request.url.path}: {exc}")

    content = {"detail": str(exc)}
    if isinstance(exc, ValidationError):
        content["errors"] = [{"attribute": e.attribute, "message": e.message} for e in exc.errors]
    headers = {"WWW-Authenticate": "Bearer"} if status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(status_code=status_code, content=content, headers=headers)
