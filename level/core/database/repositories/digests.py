"""
Nudge and digest repositories.
"""

from __future__ import annotations

from typing import List, Optional

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..entities.digests import Digest, DigestPost, DigestSection, Nudge
from .base import AsyncBaseRepository


class NudgeRepository(AsyncBaseRepository[Nudge]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Nudge)

    async def list_for_space_user(self, space_user_id: str) -> List[Nudge]:
        return await self.list(filters={"space_user_id": space_user_id}, order_by=Nudge.minute.asc())

    async def get_for_minute(self, space_user_id: str, minute: int) -> Optional[Nudge]:
        nudges = await self.list(limit=1, filters={"space_user_id": space_user_id, "minute": minute})
        return nudges[0] if nudges else None


class DigestRepository(AsyncBaseRepository[Digest]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Digest)

    async def get_by_key(self, space_user_id: str, key: str) -> Optional[Digest]:
        stmt = select(Digest).where(Digest.space_user_id == space_user_id, Digest.key == key)
        result = await self.session.exec(stmt)
        return result.first()


class DigestSectionRepository(AsyncBaseRepository[DigestSection]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, DigestSection)

    async def list_for_digest(self, digest_id: str) -> List[DigestSection]:
        return await self.list(filters={"digest_id": digest_id}, order_by=DigestSection.rank.asc())


class DigestPostRepository(AsyncBaseRepository[DigestPost]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, DigestPost)

    async def list_for_section(self, section_id: str) -> List[DigestPost]:
        return await self.list(filters={"section_id": section_id}, order_by=DigestPost.rank.asc())
