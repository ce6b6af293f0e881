"""
Space, space user and open invitation repositories.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from level.core.models.domain.enums import InvitationState, SpaceState, SpaceUserState

from ..entities.spaces import OpenInvitation, Space, SpaceUser
from .base import AsyncBaseRepository


class SpaceRepository(AsyncBaseRepository[Space]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Space)

    async def get_by_slug(self, slug: str) -> Optional[Space]:
        stmt = select(Space).where(func.lower(Space.slug) == slug.lower())
        result = await self.session.exec(stmt)
        return result.first()


class SpaceUserRepository(AsyncBaseRepository[SpaceUser]):
    """Repository for space memberships."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, SpaceUser)

    async def get_for_user(self, space_id: str, user_id: str) -> Optional[SpaceUser]:
        """Return the membership of ``user_id`` in ``space_id`` regardless of state."""
        stmt = select(SpaceUser).where(SpaceUser.space_id == space_id, SpaceUser.user_id == user_id)
        result = await self.session.exec(stmt)
        return result.first()

    async def get_active_for_user(self, space_id: str, user_id: str) -> Optional[SpaceUser]:
        """Return the membership only when both it and its space are active."""
        stmt = (
            select(SpaceUser)
            .join(Space, Space.id == SpaceUser.space_id)
            .where(
                SpaceUser.space_id == space_id,
                SpaceUser.user_id == user_id,
                SpaceUser.state == SpaceUserState.ACTIVE,
                Space.state == SpaceState.ACTIVE,
            )
        )
        result = await self.session.exec(stmt)
        return result.first()

    async def list_for_user(self, user_id: str) -> List[SpaceUser]:
        stmt = (
            select(SpaceUser)
            .where(SpaceUser.user_id == user_id, SpaceUser.state == SpaceUserState.ACTIVE)
            .order_by(SpaceUser.inserted_at.asc())
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def list_by_handles(self, space_id: str, handles: Sequence[str]) -> List[SpaceUser]:
        """Active members of a space whose handle matches one of ``handles`` (case-insensitive)."""
        if not handles:
            return []
        lowered = [h.lower() for h in handles]
        stmt = select(SpaceUser).where(
            SpaceUser.space_id == space_id,
            SpaceUser.state == SpaceUserState.ACTIVE,
            func.lower(SpaceUser.handle).in_(lowered),
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def list_by_ids(self, ids: Sequence[str]) -> List[SpaceUser]:
        if not ids:
            return []
        result = await self.session.exec(select(SpaceUser).where(SpaceUser.id.in_(list(ids))))
        return list(result.all())


class OpenInvitationRepository(AsyncBaseRepository[OpenInvitation]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, OpenInvitation)

    async def get_active_for_space(self, space_id: str) -> Optional[OpenInvitation]:
        stmt = select(OpenInvitation).where(
            OpenInvitation.space_id == space_id, OpenInvitation.state == InvitationState.ACTIVE
        )
        result = await self.session.exec(stmt)
        return result.first()

    async def get_active_by_token(self, token: str) -> Optional[OpenInvitation]:
        stmt = select(OpenInvitation).where(
            OpenInvitation.token == token, OpenInvitation.state == InvitationState.ACTIVE
        )
        result = await self.session.exec(stmt)
        return result.first()
