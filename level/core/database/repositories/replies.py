"""
Reply and reply view repositories.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..entities.replies import Reply, ReplyView
from .base import AsyncBaseRepository


class ReplyRepository(AsyncBaseRepository[Reply]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Reply)

    async def get_in_post(self, post_id: str, reply_id: str) -> Optional[Reply]:
        stmt = select(Reply).where(Reply.id == reply_id, Reply.post_id == post_id, Reply.is_deleted == False)  # noqa: E712
        result = await self.session.exec(stmt)
        return result.first()

    async def list_by_ids(self, reply_ids: Sequence[str]) -> List[Reply]:
        if not reply_ids:
            return []
        stmt = select(Reply).where(Reply.id.in_(list(reply_ids)), Reply.is_deleted == False)  # noqa: E712
        result = await self.session.exec(stmt)
        return list(result.all())

    async def count_for_post(self, post_id: str) -> int:
        stmt = select(func.count()).select_from(Reply).where(Reply.post_id == post_id, Reply.is_deleted == False)  # noqa: E712
        result = await self.session.exec(stmt)
        return result.one()


class ReplyViewRepository(AsyncBaseRepository[ReplyView]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ReplyView)

    async def has_viewed(self, reply_id: str, space_user_id: str) -> bool:
        stmt = select(ReplyView.id).where(ReplyView.reply_id == reply_id, ReplyView.space_user_id == space_user_id)
        result = await self.session.exec(stmt.limit(1))
        return result.first() is not None
