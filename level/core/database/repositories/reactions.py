"""
Post and reply reaction repositories.
"""

from __future__ import annotations

from typing import List, Optional

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..entities.reactions import PostReaction, ReplyReaction
from .base import AsyncBaseRepository


class PostReactionRepository(AsyncBaseRepository[PostReaction]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, PostReaction)

    async def get_reaction(self, post_id: str, space_user_id: str, value: str) -> Optional[PostReaction]:
        stmt = select(PostReaction).where(
            PostReaction.post_id == post_id,
            PostReaction.space_user_id == space_user_id,
            PostReaction.value == value,
        )
        result = await self.session.exec(stmt)
        return result.first()

    async def has_reacted(self, post_id: str, space_user_id: str) -> bool:
        stmt = select(PostReaction.id).where(
            PostReaction.post_id == post_id, PostReaction.space_user_id == space_user_id
        )
        result = await self.session.exec(stmt.limit(1))
        return result.first() is not None

    async def list_for_post(self, post_id: str) -> List[PostReaction]:
        stmt = select(PostReaction).where(PostReaction.post_id == post_id).order_by(PostReaction.inserted_at.asc())
        result = await self.session.exec(stmt)
        return list(result.all())


class ReplyReactionRepository(AsyncBaseRepository[ReplyReaction]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ReplyReaction)

    async def get_reaction(self, reply_id: str, space_user_id: str, value: str) -> Optional[ReplyReaction]:
        stmt = select(ReplyReaction).where(
            ReplyReaction.reply_id == reply_id,
            ReplyReaction.space_user_id == space_user_id,
            ReplyReaction.value == value,
        )
        result = await self.session.exec(stmt)
        return result.first()

    async def has_reacted(self, reply_id: str, space_user_id: str) -> bool:
        stmt = select(ReplyReaction.id).where(
            ReplyReaction.reply_id == reply_id, ReplyReaction.space_user_id == space_user_id
        )
        result = await self.session.exec(stmt.limit(1))
        return result.first() is not None

    async def list_for_reply(self, reply_id: str) -> List[ReplyReaction]:
        stmt = (
            select(ReplyReaction).where(ReplyReaction.reply_id == reply_id).order_by(ReplyReaction.inserted_at.asc())
        )
        result = await self.session.exec(stmt)
        return list(result.all())
