"""
Sign up endpoint.
"""

from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from level.core.database.session import get_session
from level.core.logging_config import get_logger
from level.server.core.config import settings
from level.server.services import AccountService

from .schemas import SignUpRequest, SignUpResponse, UserRead

router = APIRouter()
logger = get_logger(__name__)


@router.post(
    "",
    response_model=SignUpResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Sign Up",
    description="Create a user account and return an access token for it.",
)
async def sign_up(body: SignUpRequest, session: AsyncSession = Depends(get_session)):
    """
    Register a new user.

    Validation failures are answered with 422 and a list of
    ``{attribute, message}`` errors.
    """
    service = AccountService(session)
    user = await service.register(**body.model_dump())
    return SignUpResponse(
        user=UserRead.model_validate(user),
        token=service.issue_token(user),
        expires_in=settings.auth.token_ttl_seconds,
    )
