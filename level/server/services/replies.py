"""
Reply service.
"""

from __future__ import annotations

from typing import List, Sequence

from sqlmodel import select

from level.core.database.base import utc_now
from level.core.database.entities import Post, PostLog, Reply, ReplyView, SpaceUser
from level.core.database.pagination import OrderDirection, Page, PageArgs, paginate
from level.core.errors import ForbiddenError, NotFoundError
from level.core.logging_config import get_logger
from level.core.models.domain.enums import InboxState, NotificationEvent, PostLogEvent, SubscriptionState
from level.core.models.io import BodyInput, validate

from .base import BaseService
from .events import Event, post_topic, space_user_topic
from .mentions import MentionService
from .notifications import NotificationService, post_notification_topic
from .posts import can_edit

logger = get_logger(__name__)


class ReplyService(BaseService):
    """Service for replies and reply views."""

    async def get_reply(self, post: Post, reply_id: str) -> Reply:
        reply = await self.repos.replies.get_in_post(post.id, reply_id)
        if reply is None:
            raise NotFoundError("Reply")
        return reply

    async def _log(self, post: Post, reply: Reply, actor: SpaceUser, event: PostLogEvent) -> None:
        await self.repos.post_logs.create(
            PostLog(space_id=post.space_id, post_id=post.id, reply_id=reply.id, actor_id=actor.id, event=event)
        )

    async def create_reply(self, space_user: SpaceUser, post: Post, body: str) -> Reply:
        """
        Reply to a visible post.

        The replier is subscribed, every other subscriber gets the post back in
        their inbox as UNREAD and a notification, and the reply counts as
        viewed by its author.
        """
        data = validate(BodyInput, body=body)
        now = utc_now()

        reply = await self.repos.replies.create(
            Reply(space_id=post.space_id, post_id=post.id, space_user_id=space_user.id, body=data.body, inserted_at=now)
        )
        await self._log(post, reply, space_user, PostLogEvent.REPLY_CREATED)
        post.last_activity_at = now
        await self.repos.posts.update(post)

        replier = await self.repos.post_users.get_or_build(post, space_user.id)
        replier.subscription_state = SubscriptionState.SUBSCRIBED
        await self.repos.post_users.update(replier)

        mentioned = await self.using(MentionService).record_mentions(post, reply, space_user, data.body)
        mentioned_ids = {m.id for m in mentioned}

        notifications = self.using(NotificationService)
        subscribers = [
            s for s in await self.repos.post_users.list_subscribers(post.id) if s.space_user_id != space_user.id
        ]
        members = {m.id: m for m in await self.repos.space_users.list_by_ids([s.space_user_id for s in subscribers])}
        for subscriber in subscribers:
            if subscriber.inbox_state != InboxState.UNREAD:
                subscriber.inbox_state = InboxState.UNREAD
                await self.repos.post_users.update(subscriber)
                self.emit(space_user_topic(subscriber.space_user_id), Event("POSTS_MARKED_AS_UNREAD", {"post": post}))
            member = members.get(subscriber.space_user_id)
            if member is not None and member.id not in mentioned_ids:
                await notifications.record(
                    member,
                    NotificationEvent.REPLY_CREATED,
                    post_notification_topic(post.id),
                    {"post_id": post.id, "reply_id": reply.id},
                )

        await self.repos.reply_views.create(
            ReplyView(space_id=post.space_id, post_id=post.id, reply_id=reply.id, space_user_id=space_user.id)
        )

        self.emit(post_topic(post.id), Event("REPLY_CREATED", {"post": post, "reply": reply}))
        await self.commit()
        logger.info(f"Space user {space_user.id} replied {reply.id} to post {post.id}")
        return reply

    async def update_reply(self, space_user: SpaceUser, post: Post, reply: Reply, body: str) -> Reply:
        if not can_edit(space_user, reply.space_user_id):
            raise ForbiddenError()
        data = validate(BodyInput, body=body)

        reply.body = data.body
        await self.repos.replies.update(reply)
        await self._log(post, reply, space_user, PostLogEvent.REPLY_EDITED)
        await self.using(MentionService).record_mentions(post, reply, space_user, data.body)

        self.emit(post_topic(post.id), Event("REPLY_UPDATED", {"post": post, "reply": reply}))
        await self.commit()
        return reply

    async def delete_reply(self, space_user: SpaceUser, post: Post, reply: Reply) -> Reply:
        """Hide a reply; the row stays for the post log."""
        if not can_edit(space_user, reply.space_user_id):
            raise ForbiddenError()

        reply.is_deleted = True
        await self.repos.replies.update(reply)
        await self._log(post, reply, space_user, PostLogEvent.REPLY_DELETED)

        self.emit(post_topic(post.id), Event("REPLY_DELETED", {"post": post, "reply": reply}))
        await self.commit()
        logger.info(f"Reply {reply.id} deleted by {space_user.id}")
        return reply

    async def record_views(self, space_user: SpaceUser, post: Post, reply_ids: Sequence[str]) -> List[Reply]:
        """Record that the member has seen the given replies of ``post``."""
        replies = [r for r in await self.repos.replies.list_by_ids(list(reply_ids)) if r.post_id == post.id]
        if len(replies) != len(set(reply_ids)):
            raise NotFoundError("Reply")

        for reply in replies:
            if not await self.repos.reply_views.has_viewed(reply.id, space_user.id):
                await self.repos.reply_views.create(
                    ReplyView(space_id=post.space_id, post_id=post.id, reply_id=reply.id, space_user_id=space_user.id)
                )
        await self.commit()
        return replies

    async def has_viewed(self, space_user: SpaceUser, reply: Reply) -> bool:
        return await self.repos.reply_views.has_viewed(reply.id, space_user.id)

    async def list_replies(
        self, post: Post, args: PageArgs, *, direction: OrderDirection = OrderDirection.ASC
    ) -> Page:
        stmt = select(Reply).where(Reply.post_id == post.id, Reply.is_deleted == False)  # noqa: E712
        return await paginate(
            self.session, stmt, order_column=Reply.inserted_at, id_column=Reply.id, args=args, direction=direction
        )

    async def count_replies(self, post: Post) -> int:
        return await self.repos.replies.count_for_post(post.id)
