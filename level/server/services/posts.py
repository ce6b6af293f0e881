"""
Post service.

Handles posting into groups, editing, closing and reopening, the per-member
subscription and inbox state kept in ``post_users``, and post listings.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from sqlmodel import select

from level.core.database.base import utc_now
from level.core.database.entities import Group, GroupUser, Post, PostGroup, PostLog, PostUser, SpaceUser
from level.core.database.pagination import OrderDirection, Page, PageArgs, paginate
from level.core.database.repositories import visible_post_ids
from level.core.errors import ForbiddenError, NotFoundError, ValidationError
from level.core.logging_config import get_logger
from level.core.models.domain.enums import (
    FollowingFilter,
    GroupState,
    InboxFilter,
    InboxState,
    NotificationEvent,
    PostLogEvent,
    PostOrderField,
    PostState,
    PostStateFilter,
    SubscriptionState,
)
from level.core.models.io import BodyInput, validate

from .base import BaseService
from .events import Event, group_topic, post_topic, space_user_topic
from .mentions import MentionService
from .notifications import NotificationService, post_notification_topic

logger = get_logger(__name__)

_INBOX_FILTER_STATES = {
    InboxFilter.UNREAD: [InboxState.UNREAD],
    InboxFilter.READ: [InboxState.READ],
    InboxFilter.DISMISSED: [InboxState.DISMISSED],
    InboxFilter.UNDISMISSED: [InboxState.UNREAD, InboxState.READ],
}


def can_edit(space_user: SpaceUser, author_id: str) -> bool:
    """Authors and space owners/admins may edit posts and replies."""
    return space_user.id == author_id or space_user.is_admin


class PostService(BaseService):
    """Service for posts and per-member post state."""

    async def get_post(self, space_user: SpaceUser, post_id: str) -> Post:
        post = await self.repos.posts.get_visible(space_user, post_id)
        if post is None:
            raise NotFoundError("Post")
        return post

    async def get_posts(self, space_user: SpaceUser, post_ids: Sequence[str]) -> List[Post]:
        """Fetch several posts, failing when any of them is missing or invisible."""
        wanted = list(dict.fromkeys(post_ids))
        posts = await self.repos.posts.list_visible_by_ids(space_user, wanted)
        if len(posts) != len(wanted):
            raise NotFoundError("Post")
        by_id = {post.id: post for post in posts}
        return [by_id[post_id] for post_id in wanted]

    async def _log(
        self,
        post: Post,
        actor: SpaceUser,
        event: PostLogEvent,
        *,
        group_id: Optional[str] = None,
        reply_id: Optional[str] = None,
    ) -> PostLog:
        return await self.repos.post_logs.create(
            PostLog(
                space_id=post.space_id,
                post_id=post.id,
                group_id=group_id,
                reply_id=reply_id,
                actor_id=actor.id,
                event=event,
            )
        )

    async def _emit_to_groups(self, post: Post, event: Event) -> None:
        for group in await self.repos.groups.list_for_post(post.id):
            self.emit(group_topic(group.id), event)

    async def create_post(self, space_user: SpaceUser, group: Group, body: str) -> Post:
        """
        Post ``body`` into ``group``.

        The author is subscribed without the post entering their own inbox;
        mentioned members and group watchers get it as UNREAD.

        Raises:
            ValidationError: blank body or closed group
        """
        data = validate(BodyInput, body=body)
        if group.state != GroupState.OPEN:
            raise ValidationError.single("group", "is closed")

        now = utc_now()
        post = await self.repos.posts.create(
            Post(
                space_id=space_user.space_id,
                space_user_id=space_user.id,
                body=data.body,
                inserted_at=now,
                last_activity_at=now,
            )
        )
        await self.repos.post_groups.create(PostGroup(space_id=post.space_id, post_id=post.id, group_id=group.id))
        await self._log(post, space_user, PostLogEvent.POST_CREATED, group_id=group.id)

        await self.repos.post_users.create(
            PostUser(
                space_id=post.space_id,
                post_id=post.id,
                space_user_id=space_user.id,
                subscription_state=SubscriptionState.SUBSCRIBED,
                inbox_state=InboxState.EXCLUDED,
            )
        )

        mentioned = await self.using(MentionService).record_mentions(post, None, space_user, data.body)
        skip = {space_user.id} | {m.id for m in mentioned}
        await self._deliver_to_watchers(post, group, skip)

        self.emit(group_topic(group.id), Event("POST_CREATED", {"post": post, "group": group}))
        await self.commit()
        logger.info(f"Space user {space_user.id} created post {post.id} in group {group.id}")
        return post

    async def _deliver_to_watchers(self, post: Post, group: Group, skip: Iterable[str]) -> None:
        skip = set(skip)
        watchers: List[GroupUser] = await self.repos.group_users.list_watchers(group.id)
        notifications = self.using(NotificationService)
        for watcher in watchers:
            if watcher.space_user_id in skip:
                continue
            post_user = await self.repos.post_users.get_or_build(post, watcher.space_user_id)
            if post_user.subscription_state != SubscriptionState.UNSUBSCRIBED:
                post_user.subscription_state = SubscriptionState.SUBSCRIBED
            post_user.inbox_state = InboxState.UNREAD
            await self.repos.post_users.update(post_user)

            space_user = await self.repos.space_users.get_by_id(watcher.space_user_id)
            if space_user is not None:
                await notifications.record(
                    space_user,
                    NotificationEvent.POST_CREATED,
                    post_notification_topic(post.id),
                    {"post_id": post.id, "group_id": group.id},
                )
            self.emit(space_user_topic(watcher.space_user_id), Event("POSTS_MARKED_AS_UNREAD", {"post": post}))

    async def update_post(self, space_user: SpaceUser, post: Post, body: str) -> Post:
        if not can_edit(space_user, post.space_user_id):
            raise ForbiddenError()
        data = validate(BodyInput, body=body)

        post.body = data.body
        await self.repos.posts.update(post)
        await self._log(post, space_user, PostLogEvent.POST_EDITED)
        await self.using(MentionService).record_mentions(post, None, space_user, data.body)

        event = Event("POST_UPDATED", {"post": post})
        self.emit(post_topic(post.id), event)
        await self._emit_to_groups(post, event)
        await self.commit()
        return post

    async def _notify_subscribers(self, post: Post, actor: SpaceUser, event: NotificationEvent) -> None:
        notifications = self.using(NotificationService)
        subscribers = await self.repos.post_users.list_subscribers(post.id)
        member_ids = [s.space_user_id for s in subscribers if s.space_user_id != actor.id]
        members = await self.repos.space_users.list_by_ids(member_ids)
        for member in members:
            await notifications.record(
                member, event, post_notification_topic(post.id), {"post_id": post.id, "actor_id": actor.id}
            )

    async def close_post(self, space_user: SpaceUser, post: Post) -> Post:
        """Mark a post resolved; it also leaves the closer's inbox."""
        if post.state == PostState.CLOSED:
            return post
        post.state = PostState.CLOSED
        await self.repos.posts.update(post)
        await self._log(post, space_user, PostLogEvent.POST_CLOSED)

        post_user = await self.repos.post_users.get_for(post.id, space_user.id)
        if post_user is not None and post_user.inbox_state in (InboxState.UNREAD, InboxState.READ):
            post_user.inbox_state = InboxState.DISMISSED
            await self.repos.post_users.update(post_user)
            self.emit(space_user_topic(space_user.id), Event("POSTS_DISMISSED", {"post": post}))

        await self._notify_subscribers(post, space_user, NotificationEvent.POST_CLOSED)
        event = Event("POST_CLOSED", {"post": post})
        self.emit(post_topic(post.id), event)
        await self._emit_to_groups(post, event)
        await self.commit()
        logger.info(f"Post {post.id} closed by {space_user.id}")
        return post

    async def reopen_post(self, space_user: SpaceUser, post: Post) -> Post:
        if post.state == PostState.OPEN:
            return post
        post.state = PostState.OPEN
        await self.repos.posts.update(post)
        await self._log(post, space_user, PostLogEvent.POST_REOPENED)

        await self._notify_subscribers(post, space_user, NotificationEvent.POST_REOPENED)
        event = Event("POST_REOPENED", {"post": post})
        self.emit(post_topic(post.id), event)
        await self._emit_to_groups(post, event)
        await self.commit()
        logger.info(f"Post {post.id} reopened by {space_user.id}")
        return post

    async def _set_subscription(self, space_user: SpaceUser, post: Post, state: SubscriptionState, kind: str) -> Post:
        post_user = await self.repos.post_users.get_or_build(post, space_user.id)
        post_user.subscription_state = state
        await self.repos.post_users.update(post_user)
        self.emit(space_user_topic(space_user.id), Event(kind, {"post": post}))
        await self.commit()
        return post

    async def subscribe(self, space_user: SpaceUser, post: Post) -> Post:
        return await self._set_subscription(space_user, post, SubscriptionState.SUBSCRIBED, "POSTS_SUBSCRIBED")

    async def unsubscribe(self, space_user: SpaceUser, post: Post) -> Post:
        return await self._set_subscription(space_user, post, SubscriptionState.UNSUBSCRIBED, "POSTS_UNSUBSCRIBED")

    async def _set_inbox_state(
        self, space_user: SpaceUser, posts: Sequence[Post], state: InboxState, kind: str
    ) -> List[Post]:
        mentions = self.using(MentionService)
        for post in posts:
            post_user = await self.repos.post_users.get_or_build(post, space_user.id)
            post_user.inbox_state = state
            await self.repos.post_users.update(post_user)
            if state == InboxState.DISMISSED:
                await mentions.dismiss_mentions(space_user, post)
            self.emit(space_user_topic(space_user.id), Event(kind, {"post": post}))
        await self.commit()
        return list(posts)

    async def mark_as_read(self, space_user: SpaceUser, posts: Sequence[Post]) -> List[Post]:
        return await self._set_inbox_state(space_user, posts, InboxState.READ, "POSTS_MARKED_AS_READ")

    async def mark_as_unread(self, space_user: SpaceUser, posts: Sequence[Post]) -> List[Post]:
        return await self._set_inbox_state(space_user, posts, InboxState.UNREAD, "POSTS_MARKED_AS_UNREAD")

    async def dismiss(self, space_user: SpaceUser, posts: Sequence[Post]) -> List[Post]:
        """Remove posts from the member's inbox and dismiss their mentions."""
        return await self._set_inbox_state(space_user, posts, InboxState.DISMISSED, "POSTS_DISMISSED")

    async def get_post_user(self, space_user: SpaceUser, post: Post) -> Optional[PostUser]:
        return await self.repos.post_users.get_for(post.id, space_user.id)

    async def list_posts(
        self,
        space_user: SpaceUser,
        args: PageArgs,
        *,
        group: Optional[Group] = None,
        inbox: InboxFilter = InboxFilter.ALL,
        state: PostStateFilter = PostStateFilter.ALL,
        following: FollowingFilter = FollowingFilter.ALL,
        order_field: PostOrderField = PostOrderField.POSTED_AT,
        direction: OrderDirection = OrderDirection.DESC,
    ) -> Page:
        """Visible posts of the space (or of one group) as a connection page."""
        stmt = select(Post).where(Post.space_id == space_user.space_id, Post.id.in_(visible_post_ids(space_user)))
        if group is not None:
            stmt = stmt.where(Post.id.in_(select(PostGroup.post_id).where(PostGroup.group_id == group.id)))
        if state != PostStateFilter.ALL:
            stmt = stmt.where(Post.state == PostState(state.value))
        if inbox != InboxFilter.ALL:
            in_inbox = select(PostUser.post_id).where(
                PostUser.space_user_id == space_user.id, PostUser.inbox_state.in_(_INBOX_FILTER_STATES[inbox])
            )
            stmt = stmt.where(Post.id.in_(in_inbox))
        if following == FollowingFilter.IS_FOLLOWING:
            followed = select(PostUser.post_id).where(
                PostUser.space_user_id == space_user.id,
                PostUser.subscription_state == SubscriptionState.SUBSCRIBED,
            )
            stmt = stmt.where(Post.id.in_(followed))

        order_column = Post.last_activity_at if order_field == PostOrderField.LAST_ACTIVITY_AT else Post.inserted_at
        return await paginate(
            self.session, stmt, order_column=order_column, id_column=Post.id, args=args, direction=direction
        )

    async def list_logs(self, post: Post) -> List[PostLog]:
        return await self.repos.post_logs.list_for_post(post.id)
