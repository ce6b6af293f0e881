"""
Log in endpoint.
"""

from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from level.core.database.session import get_session
from level.server.core.config import settings
from level.server.services import AccountService

from .schemas import LoginRequest, TokenResponse

router = APIRouter()


@router.post(
    "",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Log In",
    description="Exchange email and password for an access token.",
)
async def create_token(body: LoginRequest, session: AsyncSession = Depends(get_session)):
    service = AccountService(session)
    user = await service.authenticate(body.email, body.password)
    return TokenResponse(token=service.issue_token(user), expires_in=settings.auth.token_ttl_seconds)
