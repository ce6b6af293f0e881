"""
GraphQL subscription root.

Each subscription checks access when it opens and again before every event it
relays, so a member who leaves a private group or loses their membership stops
receiving its events. The stream ends once access is gone.
"""

from typing import AsyncGenerator, Awaitable, Callable, Optional

import strawberry
from strawberry.types import Info

from level.core.errors import NotFoundError, UnauthorizedError
from level.core.logging_config import get_logger
from level.server.services import GroupService, PostService
from level.server.services import events as topics
from level.server.services.events import Event as BrokerEvent

from .types import Group, Notification, Post, PostReaction, Reply, ReplyReaction, Space, SpaceUser

logger = get_logger(__name__)

AccessCheck = Callable[[], Awaitable[object]]


def _convert(event: BrokerEvent, name: str, converter):
    value = event.get(name)
    return converter(value) if value is not None else None


@strawberry.type
class Event:
    """A change pushed to subscribers; only the objects the change concerns are set."""

    type: str
    topic: Optional[str] = None
    post: Optional[Post] = None
    reply: Optional[Reply] = None
    group: Optional[Group] = None
    notification: Optional[Notification] = None
    space_user: Optional[SpaceUser] = None
    post_reaction: Optional[PostReaction] = None
    reply_reaction: Optional[ReplyReaction] = None
    space: Optional[Space] = None

    @classmethod
    def from_event(cls, event: BrokerEvent) -> "Event":
        return cls(
            type=event.type,
            topic=event.get("topic"),
            post=_convert(event, "post", Post.from_entity),
            reply=_convert(event, "reply", Reply.from_entity),
            group=_convert(event, "group", Group.from_entity),
            notification=_convert(event, "notification", Notification.from_entity),
            space_user=_convert(event, "space_user", SpaceUser.from_entity),
            post_reaction=_convert(event, "post_reaction", PostReaction.from_entity),
            reply_reaction=_convert(event, "reply_reaction", ReplyReaction.from_entity),
            space=_convert(event, "space", Space.from_entity),
        )


async def _has_access(info: Info, check: AccessCheck) -> bool:
    try:
        async with info.context.lock:
            await check()
    except (NotFoundError, UnauthorizedError):
        return False
    return True


async def _relay(info: Info, topic: str, check: Optional[AccessCheck] = None) -> AsyncGenerator[Event, None]:
    logger.debug(f"Subscription opened on {topic}")
    try:
        async with info.context.broker.subscribe(topic) as subscription:
            async for event in subscription:
                if check is not None and not await _has_access(info, check):
                    logger.info(f"Subscription on {topic} lost access, closing")
                    return
                yield Event.from_event(event)
    finally:
        logger.debug(f"Subscription closed on {topic}")


@strawberry.type
class Subscription:
    @strawberry.subscription(description="Notifications and account-wide changes of the viewer")
    async def user_events(self, info: Info) -> AsyncGenerator[Event, None]:
        async with info.context.lock:
            viewer = await info.context.viewer()
        async for event in _relay(info, topics.user_topic(viewer.id)):
            yield event

    @strawberry.subscription(description="Inbox, bookmark and membership changes of the viewer in a space")
    async def space_user_events(self, info: Info, space_id: strawberry.ID) -> AsyncGenerator[Event, None]:
        async with info.context.lock:
            space_user = await info.context.space_user(space_id)

        async def check():
            return await info.context.space_user(space_id, refresh=True)

        async for event in _relay(info, topics.space_user_topic(space_user.id), check):
            yield event

    @strawberry.subscription
    async def space_events(self, info: Info, space_id: strawberry.ID) -> AsyncGenerator[Event, None]:
        async with info.context.lock:
            space_user = await info.context.space_user(space_id)

        async def check():
            return await info.context.space_user(space_id, refresh=True)

        async for event in _relay(info, topics.space_topic(space_user.space_id), check):
            yield event

    @strawberry.subscription
    async def group_events(
        self, info: Info, space_id: strawberry.ID, group_id: strawberry.ID
    ) -> AsyncGenerator[Event, None]:
        async with info.context.lock:
            space_user = await info.context.space_user(space_id)
            group = await info.context.service(GroupService).get_group(space_user, group_id)

        async def check():
            current = await info.context.space_user(space_id, refresh=True)
            return await info.context.service(GroupService).get_group(current, group.id)

        async for event in _relay(info, topics.group_topic(group.id), check):
            yield event

    @strawberry.subscription
    async def post_events(
        self, info: Info, space_id: strawberry.ID, post_id: strawberry.ID
    ) -> AsyncGenerator[Event, None]:
        async with info.context.lock:
            space_user = await info.context.space_user(space_id)
            post = await info.context.service(PostService).get_post(space_user, post_id)

        async def check():
            current = await info.context.space_user(space_id, refresh=True)
            return await info.context.service(PostService).get_post(current, post.id)

        async for event in _relay(info, topics.post_topic(post.id), check):
            yield event
