"""
User mention repository.
"""

from __future__ import annotations

from typing import List

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..entities.mentions import UserMention
from .base import AsyncBaseRepository


class UserMentionRepository(AsyncBaseRepository[UserMention]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, UserMention)

    async def list_for_post(self, post_id: str) -> List[UserMention]:
        return await self.list(filters={"post_id": post_id}, order_by=UserMention.occurred_at.asc())

    async def list_undismissed(self, post_id: str, mentioned_id: str) -> List[UserMention]:
        stmt = select(UserMention).where(
            UserMention.post_id == post_id,
            UserMention.mentioned_id == mentioned_id,
            UserMention.dismissed_at == None,  # noqa: E711
        )
        result = await self.session.exec(stmt)
        return list(result.all())
