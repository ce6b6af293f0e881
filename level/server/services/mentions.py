"""
Mention service.

A mention is an ``@handle`` token in a post or reply body. Mentioned members
who can see the post are subscribed to it, get it back in their inbox and
receive a notification.
"""

from __future__ import annotations

import re
from typing import List, Optional

from level.core.database.base import utc_now
from level.core.database.entities import Post, Reply, SpaceUser, UserMention
from level.core.logging_config import get_logger
from level.core.models.domain.enums import InboxState, NotificationEvent, SubscriptionState

from .base import BaseService
from .events import Event, space_user_topic
from .notifications import NotificationService, post_notification_topic

logger = get_logger(__name__)

MENTION_PATTERN = re.compile(r"(?:^|(?<=[^\w@/.]))@([a-z0-9][a-z0-9-]*)", re.IGNORECASE)


def extract_handles(body: Optional[str]) -> List[str]:
    """Return mentioned handles lower-cased, de-duplicated, in order of appearance."""
    seen: List[str] = []
    for match in MENTION_PATTERN.finditer(body or ""):
        handle = match.group(1).lower().rstrip("-")
        if handle and handle not in seen:
            seen.append(handle)
    return seen


class MentionService(BaseService):
    async def record_mentions(
        self, post: Post, reply: Optional[Reply], author: SpaceUser, body: str
    ) -> List[SpaceUser]:
        """
        Store the mentions found in ``body`` and pull the post into the inboxes
        of the mentioned members.

        Members already mentioned by the same post or reply are skipped, as are
        the author and members who cannot see the post.

        Returns:
            The newly mentioned space users
        """
        handles = extract_handles(body)
        if not handles:
            return []

        reply_id = reply.id if reply is not None else None
        already = {
            m.mentioned_id for m in await self.repos.mentions.list_for_post(post.id) if m.reply_id == reply_id
        }
        notifications = self.using(NotificationService)
        mentioned: List[SpaceUser] = []

        for space_user in await self.repos.space_users.list_by_handles(post.space_id, handles):
            if space_user.id == author.id or space_user.id in already:
                continue
            if await self.repos.posts.get_visible(space_user, post.id) is None:
                continue

            await self.repos.mentions.create(
                UserMention(
                    space_id=post.space_id,
                    post_id=post.id,
                    reply_id=reply_id,
                    mentioner_id=author.id,
                    mentioned_id=space_user.id,
                )
            )
            post_user = await self.repos.post_users.get_or_build(post, space_user.id)
            post_user.subscription_state = SubscriptionState.SUBSCRIBED
            post_user.inbox_state = InboxState.UNREAD
            await self.repos.post_users.update(post_user)

            event = NotificationEvent.REPLY_CREATED if reply is not None else NotificationEvent.POST_CREATED
            data = {"post_id": post.id, "mentioner_id": author.id, "mentioned": True}
            if reply_id is not None:
                data["reply_id"] = reply_id
            await notifications.record(space_user, event, post_notification_topic(post.id), data)

            self.emit(space_user_topic(space_user.id), Event("USER_MENTIONED", {"post": post, "reply": reply}))
            self.emit(space_user_topic(space_user.id), Event("POSTS_MARKED_AS_UNREAD", {"post": post}))
            mentioned.append(space_user)

        if mentioned:
            logger.debug(f"Recorded {len(mentioned)} mention(s) on post {post.id}")
        return mentioned

    async def dismiss_mentions(self, space_user: SpaceUser, post: Post) -> int:
        """Stamp ``dismissed_at`` on the member's open mentions in ``post``; the caller commits."""
        mentions = await self.repos.mentions.list_undismissed(post.id, space_user.id)
        now = utc_now()
        for mention in mentions:
            mention.dismissed_at = now
            await self.repos.mentions.update(mention)
        return len(mentions)

    async def list_mentions(self, space_user: SpaceUser, post: Post) -> List[UserMention]:
        """Undismissed mentions of ``space_user`` in ``post``."""
        return await self.repos.mentions.list_undismissed(post.id, space_user.id)
