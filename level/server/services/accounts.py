"""
Account service: sign up, log in, tokens and profile edits.
"""

from __future__ import annotations

from typing import Optional

from level.core.database.base import utc_now
from level.core.database.entities import User
from level.core.errors import FieldError, UnauthorizedError, ValidationError
from level.core.logging_config import get_logger
from level.core.models.domain.enums import UserState
from level.core.models.io import Credentials, UserCreate, UserUpdate, validate
from level.server.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)

from .base import BaseService
from .events import Event, space_user_topic

logger = get_logger(__name__)


class AccountService(BaseService):
    """Service managing users and their credentials."""

    async def register(
        self,
        *,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        handle: str,
        time_zone: Optional[str] = None,
    ) -> User:
        """
        Create a user account.

        Raises:
            ValidationError: on malformed input or when email/handle are taken
        """
        data = validate(
            UserCreate,
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            handle=handle,
            time_zone=time_zone or "UTC",
        )

        errors = []
        if await self.repos.users.get_by_email(data.email) is not None:
            errors.append(FieldError("email", "has already been taken"))
        if await self.repos.users.get_by_handle(data.handle) is not None:
            errors.append(FieldError("handle", "has already been taken"))
        if errors:
            raise ValidationError(errors)

        user = User(
            email=data.email,
            hashed_password=hash_password(data.password),
            first_name=data.first_name,
            last_name=data.last_name,
            handle=data.handle,
            time_zone=data.time_zone,
        )
        await self.repos.users.create(user)
        await self.commit()
        logger.info(f"Registered user {user.id} (@{user.handle})")
        return user

    async def authenticate(self, email: str, password: str) -> User:
        """Return the active user owning these credentials.

        Raises:
            UnauthorizedError: for unknown emails, wrong passwords and disabled accounts
        """
        credentials = Credentials(email=email or "", password=password or "")
        user = await self.repos.users.get_by_email(credentials.email)
        if user is None or not verify_password(credentials.password, user.hashed_password):
            logger.debug("Rejected login attempt with invalid credentials")
            raise UnauthorizedError("Email or password is incorrect")
        if user.state != UserState.ACTIVE:
            raise UnauthorizedError("Your account is disabled")

        user.last_seen_at = utc_now()
        await self.repos.users.update(user)
        await self.commit()
        return user

    @staticmethod
    def issue_token(user: User) -> str:
        return create_access_token(user.id)

    async def verify_token(self, token: str) -> User:
        """Resolve a bearer token to its active user.

        Raises:
            UnauthorizedError: for expired, malformed or unknown-subject tokens
        """
        claims = decode_access_token(token)
        user = await self.repos.users.get_by_id(claims.sub)
        if user is None or user.state != UserState.ACTIVE:
            raise UnauthorizedError()
        return user

    async def update_user(
        self,
        user: User,
        *,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        handle: Optional[str] = None,
        time_zone: Optional[str] = None,
    ) -> User:
        """Edit profile fields; names and handle are copied onto every space membership."""
        data = validate(
            UserUpdate, first_name=first_name, last_name=last_name, handle=handle, time_zone=time_zone
        )

        if data.handle is not None and data.handle.lower() != user.handle.lower():
            other = await self.repos.users.get_by_handle(data.handle)
            if other is not None and other.id != user.id:
                raise ValidationError.single("handle", "has already been taken")

        for name in ("first_name", "last_name", "handle", "time_zone"):
            value = getattr(data, name)
            if value is not None:
                setattr(user, name, value)
        await self.repos.users.update(user)

        for space_user in await self.repos.space_users.list_for_user(user.id):
            space_user.first_name = user.first_name
            space_user.last_name = user.last_name
            space_user.handle = user.handle
            await self.repos.space_users.update(space_user)
            self.emit(space_user_topic(space_user.id), Event("SPACE_USER_UPDATED", {"space_user": space_user}))

        await self.commit()
        logger.debug(f"Updated profile of user {user.id}")
        return user
