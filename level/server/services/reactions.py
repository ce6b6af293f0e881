"""
Reaction service.

Reacting twice with the same value keeps the first reaction. The author of
the reacted post or reply is notified unless they reacted themselves.
"""

from __future__ import annotations

from typing import List

from level.core.database.entities import Post, PostReaction, Reply, ReplyReaction, SpaceUser
from level.core.errors import NotFoundError
from level.core.logging_config import get_logger
from level.core.models.domain.enums import NotificationEvent
from level.core.models.io import ReactionInput, validate

from .base import BaseService
from .events import Event, post_topic
from .notifications import NotificationService, post_notification_topic, reply_notification_topic

logger = get_logger(__name__)


class ReactionService(BaseService):
    async def _notify_author(
        self, author_id: str, reactor: SpaceUser, event: NotificationEvent, topic: str, data: dict
    ) -> None:
        if author_id == reactor.id:
            return
        author = await self.repos.space_users.get_by_id(author_id)
        if author is not None:
            await self.using(NotificationService).record(author, event, topic, data)

    async def create_post_reaction(self, space_user: SpaceUser, post: Post, value: str) -> PostReaction:
        data = validate(ReactionInput, value=value)
        existing = await self.repos.post_reactions.get_reaction(post.id, space_user.id, data.value)
        if existing is not None:
            return existing

        reaction = await self.repos.post_reactions.create(
            PostReaction(space_id=post.space_id, post_id=post.id, space_user_id=space_user.id, value=data.value)
        )
        await self._notify_author(
            post.space_user_id,
            space_user,
            NotificationEvent.POST_REACTION_CREATED,
            post_notification_topic(post.id),
            {"post_id": post.id, "reaction_id": reaction.id, "value": reaction.value},
        )
        self.emit(post_topic(post.id), Event("POST_REACTION_CREATED", {"post": post, "post_reaction": reaction}))
        await self.commit()
        logger.debug(f"Space user {space_user.id} reacted {reaction.value!r} to post {post.id}")
        return reaction

    async def delete_post_reaction(self, space_user: SpaceUser, post: Post, value: str) -> PostReaction:
        data = validate(ReactionInput, value=value)
        reaction = await self.repos.post_reactions.get_reaction(post.id, space_user.id, data.value)
        if reaction is None:
            raise NotFoundError("Reaction")

        await self.repos.post_reactions.delete(reaction.id)
        self.emit(post_topic(post.id), Event("POST_REACTION_DELETED", {"post": post, "post_reaction": reaction}))
        await self.commit()
        return reaction

    async def create_reply_reaction(
        self, space_user: SpaceUser, post: Post, reply: Reply, value: str
    ) -> ReplyReaction:
        data = validate(ReactionInput, value=value)
        existing = await self.repos.reply_reactions.get_reaction(reply.id, space_user.id, data.value)
        if existing is not None:
            return existing

        reaction = await self.repos.reply_reactions.create(
            ReplyReaction(
                space_id=post.space_id,
                post_id=post.id,
                reply_id=reply.id,
                space_user_id=space_user.id,
                value=data.value,
            )
        )
        await self._notify_author(
            reply.space_user_id,
            space_user,
            NotificationEvent.REPLY_REACTION_CREATED,
            reply_notification_topic(reply.id),
            {"post_id": post.id, "reply_id": reply.id, "reaction_id": reaction.id, "value": reaction.value},
        )
        self.emit(
            post_topic(post.id),
            Event("REPLY_REACTION_CREATED", {"post": post, "reply": reply, "reply_reaction": reaction}),
        )
        await self.commit()
        return reaction

    async def delete_reply_reaction(
        self, space_user: SpaceUser, post: Post, reply: Reply, value: str
    ) -> ReplyReaction:
        data = validate(ReactionInput, value=value)
        reaction = await self.repos.reply_reactions.get_reaction(reply.id, space_user.id, data.value)
        if reaction is None:
            raise NotFoundError("Reaction")

        await self.repos.reply_reactions.delete(reaction.id)
        self.emit(
            post_topic(post.id),
            Event("REPLY_REACTION_DELETED", {"post": post, "reply": reply, "reply_reaction": reaction}),
        )
        await self.commit()
        return reaction

    async def has_reacted_to_post(self, space_user: SpaceUser, post: Post) -> bool:
        return await self.repos.post_reactions.has_reacted(post.id, space_user.id)

    async def has_reacted_to_reply(self, space_user: SpaceUser, reply: Reply) -> bool:
        return await self.repos.reply_reactions.has_reacted(reply.id, space_user.id)

    async def list_post_reactions(self, post: Post) -> List[PostReaction]:
        return await self.repos.post_reactions.list_for_post(post.id)

    async def list_reply_reactions(self, reply: Reply) -> List[ReplyReaction]:
        return await self.repos.reply_reactions.list_for_reply(reply.id)
