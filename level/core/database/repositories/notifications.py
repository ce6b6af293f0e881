"""
Notification repository.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from level.core.models.domain.enums import NotificationState

from ..entities.notifications import Notification
from .base import AsyncBaseRepository


class NotificationRepository(AsyncBaseRepository[Notification]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Notification)

    async def list_undismissed(self, space_user_ids: Sequence[str], topic: Optional[str] = None) -> List[Notification]:
        if not space_user_ids:
            return []
        stmt = select(Notification).where(
            Notification.space_user_id.in_(list(space_user_ids)),
            Notification.state == NotificationState.UNDISMISSED,
        )
        if topic is not None:
            stmt = stmt.where(Notification.topic == topic)
        result = await self.session.exec(stmt)
        return list(result.all())
