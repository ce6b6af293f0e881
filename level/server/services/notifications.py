"""
Notification service.

Notifications are recorded per space member and read per user: the
notification feed of a user spans every space they belong to.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from sqlmodel import select

from level.core.database.entities import Notification, SpaceUser, User
from level.core.database.pagination import OrderDirection, Page, PageArgs, paginate
from level.core.logging_config import get_logger
from level.core.models.domain.enums import NotificationEvent, NotificationState

from .base import BaseService
from .events import Event, user_topic

logger = get_logger(__name__)


def post_notification_topic(post_id: str) -> str:
    return f"post:{post_id}"


def reply_notification_topic(reply_id: str) -> str:
    return f"reply:{reply_id}"


class NotificationService(BaseService):
    async def record(
        self,
        space_user: SpaceUser,
        event: NotificationEvent,
        topic: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> Notification:
        """Stage a notification and queue its delivery to the member's user topic."""
        notification = await self.repos.notifications.create(
            Notification(
                space_id=space_user.space_id,
                space_user_id=space_user.id,
                topic=topic,
                event=event,
                data=dict(data or {}),
            )
        )
        self.emit(user_topic(space_user.user_id), Event("NOTIFICATION_CREATED", {"notification": notification}))
        logger.debug(f"Notification {event.value} on {topic} for space user {space_user.id}")
        return notification

    async def list_notifications(
        self, user: User, args: PageArgs, *, state: Optional[NotificationState] = None
    ) -> Page:
        memberships = await self.repos.space_users.list_for_user(user.id)
        stmt = select(Notification).where(Notification.space_user_id.in_([m.id for m in memberships]))
        if state is not None:
            stmt = stmt.where(Notification.state == state)
        return await paginate(
            self.session,
            stmt,
            order_column=Notification.inserted_at,
            id_column=Notification.id,
            args=args,
            direction=OrderDirection.DESC,
        )

    async def dismiss(self, user: User, topic: Optional[str] = None) -> Optional[str]:
        """
        Dismiss the user's undismissed notifications.

        Args:
            user: Owner of the notifications
            topic: Only dismiss notifications of this topic; ``None`` dismisses all

        Returns:
            The dismissed topic (``None`` when everything was dismissed)
        """
        memberships = await self.repos.space_users.list_for_user(user.id)
        notifications = await self.repos.notifications.list_undismissed([m.id for m in memberships], topic)
        for notification in notifications:
            notification.state = NotificationState.DISMISSED
            await self.repos.notifications.update(notification)

        self.emit(user_topic(user.id), Event("NOTIFICATIONS_DISMISSED", {"topic": topic}))
        await self.commit()
        logger.debug(f"Dismissed {len(notifications)} notification(s) of user {user.id} (topic={topic})")
        return topic
