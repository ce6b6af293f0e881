"""
GraphQL mutation root.

Input problems come back in the payload (``success: false`` plus
``errors``); missing records and permission failures surface as GraphQL
errors.
"""

from typing import List, Optional

import strawberry
from strawberry.types import Info

from level.core.errors import ValidationError
from level.server.services import (
    AccountService,
    DigestService,
    GroupService,
    NotificationService,
    PostService,
    ReactionService,
    ReplyService,
    SpaceService,
)

from .types import (
    Group,
    MutationPayload,
    Nudge,
    Post,
    PostReaction,
    Reply,
    ReplyReaction,
    Space,
    SpaceUser,
    SpaceUserRole,
    User,
)

# ---------------------------------------------------------------------
# Payloads
# ---------------------------------------------------------------------


@strawberry.type
class UserPayload(MutationPayload):
    user: Optional[User] = None


@strawberry.type
class SpacePayload(MutationPayload):
    space: Optional[Space] = None
    space_user: Optional[SpaceUser] = None


@strawberry.type
class SpaceUserPayload(MutationPayload):
    space_user: Optional[SpaceUser] = None


@strawberry.type
class OpenInvitationPayload(MutationPayload):
    token: Optional[str] = None


@strawberry.type
class GroupPayload(MutationPayload):
    group: Optional[Group] = None


@strawberry.type
class PostPayload(MutationPayload):
    post: Optional[Post] = None


@strawberry.type
class PostsPayload(MutationPayload):
    posts: Optional[List[Post]] = None


@strawberry.type
class ReplyPayload(MutationPayload):
    post: Optional[Post] = None
    reply: Optional[Reply] = None


@strawberry.type
class RepliesPayload(MutationPayload):
    replies: Optional[List[Reply]] = None


@strawberry.type
class PostReactionPayload(MutationPayload):
    post: Optional[Post] = None
    reaction: Optional[PostReaction] = None


@strawberry.type
class ReplyReactionPayload(MutationPayload):
    post: Optional[Post] = None
    reply: Optional[Reply] = None
    reaction: Optional[ReplyReaction] = None


@strawberry.type
class DismissNotificationsPayload(MutationPayload):
    topic: Optional[str] = None


@strawberry.type
class NudgePayload(MutationPayload):
    nudge: Optional[Nudge] = None


def _ok(payload_cls, **fields):
    return payload_cls(success=True, errors=[], **fields)


# ---------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------


@strawberry.type
class Mutation:
    # Accounts and spaces

    @strawberry.mutation
    async def update_user(
        self,
        info: Info,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        handle: Optional[str] = None,
        time_zone: Optional[str] = None,
    ) -> UserPayload:
        viewer = await info.context.viewer()
        try:
            user = await info.context.service(AccountService).update_user(
                viewer, first_name=first_name, last_name=last_name, handle=handle, time_zone=time_zone
            )
        except ValidationError as exc:
            return UserPayload.failed(exc)
        return _ok(UserPayload, user=User.from_entity(user))

    @strawberry.mutation
    async def create_space(self, info: Info, name: str, slug: str) -> SpacePayload:
        viewer = await info.context.viewer()
        try:
            space, owner = await info.context.service(SpaceService).create_space(viewer, name=name, slug=slug)
        except ValidationError as exc:
            return SpacePayload.failed(exc)
        return _ok(SpacePayload, space=Space.from_entity(space), space_user=SpaceUser.from_entity(owner))

    @strawberry.mutation
    async def update_space(
        self, info: Info, space_id: strawberry.ID, name: Optional[str] = None, slug: Optional[str] = None
    ) -> SpacePayload:
        space_user = await info.context.space_user(space_id)
        try:
            space = await info.context.service(SpaceService).update_space(space_user, name=name, slug=slug)
        except ValidationError as exc:
            return SpacePayload.failed(exc)
        return _ok(SpacePayload, space=Space.from_entity(space), space_user=SpaceUser.from_entity(space_user))

    @strawberry.mutation
    async def join_space(self, info: Info, token: str) -> SpacePayload:
        viewer = await info.context.viewer()
        service = info.context.service(SpaceService)
        space_user = await service.join_space(viewer, token)
        space = await service.get_space(viewer, space_id=space_user.space_id)
        return _ok(SpacePayload, space=Space.from_entity(space), space_user=SpaceUser.from_entity(space_user))

    @strawberry.mutation
    async def reset_open_invitation(self, info: Info, space_id: strawberry.ID) -> OpenInvitationPayload:
        space_user = await info.context.space_user(space_id)
        invitation = await info.context.service(SpaceService).reset_open_invitation(space_user)
        return _ok(OpenInvitationPayload, token=invitation.token)

    @strawberry.mutation
    async def update_role(
        self, info: Info, space_id: strawberry.ID, space_user_id: strawberry.ID, role: SpaceUserRole
    ) -> SpaceUserPayload:
        actor = await info.context.space_user(space_id)
        try:
            target = await info.context.service(SpaceService).update_role(actor, space_user_id, role)
        except ValidationError as exc:
            return SpaceUserPayload.failed(exc)
        return _ok(SpaceUserPayload, space_user=SpaceUser.from_entity(target))

    # Groups

    @strawberry.mutation
    async def create_group(
        self,
        info: Info,
        space_id: strawberry.ID,
        name: str,
        description: Optional[str] = None,
        is_private: bool = False,
    ) -> GroupPayload:
        space_user = await info.context.space_user(space_id)
        try:
            group = await info.context.service(GroupService).create_group(
                space_user, name=name, description=description, is_private=is_private
            )
        except ValidationError as exc:
            return GroupPayload.failed(exc)
        return _ok(GroupPayload, group=Group.from_entity(group))

    @strawberry.mutation
    async def update_group(
        self,
        info: Info,
        space_id: strawberry.ID,
        group_id: strawberry.ID,
        name: Optional[str] = None,
        description: Optional[str] = None,
        is_private: Optional[bool] = None,
    ) -> GroupPayload:
        space_user = await info.context.space_user(space_id)
        service = info.context.service(GroupService)
        group = await service.get_group(space_user, group_id)
        try:
            group = await service.update_group(
                space_user, group, name=name, description=description, is_private=is_private
            )
        except ValidationError as exc:
            return GroupPayload.failed(exc)
        return _ok(GroupPayload, group=Group.from_entity(group))

    @strawberry.mutation
    async def close_group(self, info: Info, space_id: strawberry.ID, group_id: strawberry.ID) -> GroupPayload:
        space_user = await info.context.space_user(space_id)
        service = info.context.service(GroupService)
        group = await service.close_group(space_user, await service.get_group(space_user, group_id))
        return _ok(GroupPayload, group=Group.from_entity(group))

    @strawberry.mutation
    async def reopen_group(self, info: Info, space_id: strawberry.ID, group_id: strawberry.ID) -> GroupPayload:
        space_user = await info.context.space_user(space_id)
        service = info.context.service(GroupService)
        group = await service.reopen_group(space_user, await service.get_group(space_user, group_id))
        return _ok(GroupPayload, group=Group.from_entity(group))

    @strawberry.mutation
    async def subscribe_to_group(
        self, info: Info, space_id: strawberry.ID, group_id: strawberry.ID
    ) -> GroupPayload:
        space_user = await info.context.space_user(space_id)
        service = info.context.service(GroupService)
        group = await service.get_group(space_user, group_id)
        await service.subscribe(space_user, group)
        return _ok(GroupPayload, group=Group.from_entity(group))

    @strawberry.mutation
    async def unsubscribe_from_group(
        self, info: Info, space_id: strawberry.ID, group_id: strawberry.ID
    ) -> GroupPayload:
        space_user = await info.context.space_user(space_id)
        service = info.context.service(GroupService)
        group = await service.unsubscribe(space_user, await service.get_group(space_user, group_id))
        return _ok(GroupPayload, group=Group.from_entity(group))

    @strawberry.mutation
    async def watch_group(self, info: Info, space_id: strawberry.ID, group_id: strawberry.ID) -> GroupPayload:
        space_user = await info.context.space_user(space_id)
        service = info.context.service(GroupService)
        group = await service.get_group(space_user, group_id)
        await service.watch(space_user, group)
        return _ok(GroupPayload, group=Group.from_entity(group))

    @strawberry.mutation
    async def unwatch_group(self, info: Info, space_id: strawberry.ID, group_id: strawberry.ID) -> GroupPayload:
        space_user = await info.context.space_user(space_id)
        service = info.context.service(GroupService)
        group = await service.unwatch(space_user, await service.get_group(space_user, group_id))
        return _ok(GroupPayload, group=Group.from_entity(group))

    @strawberry.mutation
    async def bookmark_group(self, info: Info, space_id: strawberry.ID, group_id: strawberry.ID) -> GroupPayload:
        space_user = await info.context.space_user(space_id)
        service = info.context.service(GroupService)
        group = await service.bookmark(space_user, await service.get_group(space_user, group_id))
        return _ok(GroupPayload, group=Group.from_entity(group))

    @strawberry.mutation
    async def unbookmark_group(
        self, info: Info, space_id: strawberry.ID, group_id: strawberry.ID
    ) -> GroupPayload:
        space_user = await info.context.space_user(space_id)
        service = info.context.service(GroupService)
        group = await service.unbookmark(space_user, await service.get_group(space_user, group_id))
        return _ok(GroupPayload, group=Group.from_entity(group))

    # Posts

    @strawberry.mutation
    async def create_post(
        self, info: Info, space_id: strawberry.ID, group_id: strawberry.ID, body: str
    ) -> PostPayload:
        space_user = await info.context.space_user(space_id)
        group = await info.context.service(GroupService).get_group(space_user, group_id)
        try:
            post = await info.context.service(PostService).create_post(space_user, group, body)
        except ValidationError as exc:
            return PostPayload.failed(exc)
        return _ok(PostPayload, post=Post.from_entity(post))

    @strawberry.mutation
    async def update_post(self, info: Info, space_id: strawberry.ID, post_id: strawberry.ID, body: str) -> PostPayload:
        space_user = await info.context.space_user(space_id)
        service = info.context.service(PostService)
        post = await service.get_post(space_user, post_id)
        try:
            post = await service.update_post(space_user, post, body)
        except ValidationError as exc:
            return PostPayload.failed(exc)
        return _ok(PostPayload, post=Post.from_entity(post))

    @strawberry.mutation
    async def close_post(self, info: Info, space_id: strawberry.ID, post_id: strawberry.ID) -> PostPayload:
        space_user = await info.context.space_user(space_id)
        service = info.context.service(PostService)
        post = await service.close_post(space_user, await service.get_post(space_user, post_id))
        return _ok(PostPayload, post=Post.from_entity(post))

    @strawberry.mutation
    async def reopen_post(self, info: Info, space_id: strawberry.ID, post_id: strawberry.ID) -> PostPayload:
        space_user = await info.context.space_user(space_id)
        service = info.context.service(PostService)
        post = await service.reopen_post(space_user, await service.get_post(space_user, post_id))
        return _ok(PostPayload, post=Post.from_entity(post))

    @strawberry.mutation
    async def subscribe_to_post(self, info: Info, space_id: strawberry.ID, post_id: strawberry.ID) -> PostPayload:
        space_user = await info.context.space_user(space_id)
        service = info.context.service(PostService)
        post = await service.subscribe(space_user, await service.get_post(space_user, post_id))
        return _ok(PostPayload, post=Post.from_entity(post))

    @strawberry.mutation
    async def unsubscribe_from_post(
        self, info: Info, space_id: strawberry.ID, post_id: strawberry.ID
    ) -> PostPayload:
        space_user = await info.context.space_user(space_id)
        service = info.context.service(PostService)
        post = await service.unsubscribe(space_user, await service.get_post(space_user, post_id))
        return _ok(PostPayload, post=Post.from_entity(post))

    @strawberry.mutation
    async def mark_as_read(
        self, info: Info, space_id: strawberry.ID, post_ids: List[strawberry.ID]
    ) -> PostsPayload:
        space_user = await info.context.space_user(space_id)
        service = info.context.service(PostService)
        posts = await service.mark_as_read(space_user, await service.get_posts(space_user, post_ids))
        return _ok(PostsPayload, posts=[Post.from_entity(post) for post in posts])

    @strawberry.mutation
    async def mark_as_unread(
        self, info: Info, space_id: strawberry.ID, post_ids: List[strawberry.ID]
    ) -> PostsPayload:
        space_user = await info.context.space_user(space_id)
        service = info.context.service(PostService)
        posts = await service.mark_as_unread(space_user, await service.get_posts(space_user, post_ids))
        return _ok(PostsPayload, posts=[Post.from_entity(post) for post in posts])

    @strawberry.mutation
    async def dismiss_posts(
        self, info: Info, space_id: strawberry.ID, post_ids: List[strawberry.ID]
    ) -> PostsPayload:
        space_user = await info.context.space_user(space_id)
        service = info.context.service(PostService)
        posts = await service.dismiss(space_user, await service.get_posts(space_user, post_ids))
        return _ok(PostsPayload, posts=[Post.from_entity(post) for post in posts])

    # Replies

    @strawberry.mutation
    async def create_reply(
        self, info: Info, space_id: strawberry.ID, post_id: strawberry.ID, body: str
    ) -> ReplyPayload:
        space_user = await info.context.space_user(space_id)
        post = await info.context.service(PostService).get_post(space_user, post_id)
        try:
            reply = await info.context.service(ReplyService).create_reply(space_user, post, body)
        except ValidationError as exc:
            return ReplyPayload.failed(exc)
        return _ok(ReplyPayload, post=Post.from_entity(post), reply=Reply.from_entity(reply))

    @strawberry.mutation
    async def update_reply(
        self, info: Info, space_id: strawberry.ID, post_id: strawberry.ID, reply_id: strawberry.ID, body: str
    ) -> ReplyPayload:
        space_user = await info.context.space_user(space_id)
        post = await info.context.service(PostService).get_post(space_user, post_id)
        service = info.context.service(ReplyService)
        reply = await service.get_reply(post, reply_id)
        try:
            reply = await service.update_reply(space_user, post, reply, body)
        except ValidationError as exc:
            return ReplyPayload.failed(exc)
        return _ok(ReplyPayload, post=Post.from_entity(post), reply=Reply.from_entity(reply))

    @strawberry.mutation
    async def delete_reply(
        self, info: Info, space_id: strawberry.ID, post_id: strawberry.ID, reply_id: strawberry.ID
    ) -> ReplyPayload:
        space_user = await info.context.space_user(space_id)
        post = await info.context.service(PostService).get_post(space_user, post_id)
        service = info.context.service(ReplyService)
        reply = await service.delete_reply(space_user, post, await service.get_reply(post, reply_id))
        return _ok(ReplyPayload, post=Post.from_entity(post), reply=Reply.from_entity(reply))

    @strawberry.mutation
    async def record_reply_views(
        self, info: Info, space_id: strawberry.ID, post_id: strawberry.ID, reply_ids: List[strawberry.ID]
    ) -> RepliesPayload:
        space_user = await info.context.space_user(space_id)
        post = await info.context.service(PostService).get_post(space_user, post_id)
        replies = await info.context.service(ReplyService).record_views(space_user, post, reply_ids)
        return _ok(RepliesPayload, replies=[Reply.from_entity(reply) for reply in replies])

    # Reactions

    @strawberry.mutation
    async def create_post_reaction(
        self, info: Info, space_id: strawberry.ID, post_id: strawberry.ID, value: str
    ) -> PostReactionPayload:
        space_user = await info.context.space_user(space_id)
        post = await info.context.service(PostService).get_post(space_user, post_id)
        try:
            reaction = await info.context.service(ReactionService).create_post_reaction(space_user, post, value)
        except ValidationError as exc:
            return PostReactionPayload.failed(exc)
        return _ok(PostReactionPayload, post=Post.from_entity(post), reaction=PostReaction.from_entity(reaction))

    @strawberry.mutation
    async def delete_post_reaction(
        self, info: Info, space_id: strawberry.ID, post_id: strawberry.ID, value: str
    ) -> PostReactionPayload:
        space_user = await info.context.space_user(space_id)
        post = await info.context.service(PostService).get_post(space_user, post_id)
        try:
            reaction = await info.context.service(ReactionService).delete_post_reaction(space_user, post, value)
        except ValidationError as exc:
            return PostReactionPayload.failed(exc)
        return _ok(PostReactionPayload, post=Post.from_entity(post), reaction=PostReaction.from_entity(reaction))

    @strawberry.mutation
    async def create_reply_reaction(
        self, info: Info, space_id: strawberry.ID, post_id: strawberry.ID, reply_id: strawberry.ID, value: str
    ) -> ReplyReactionPayload:
        space_user = await info.context.space_user(space_id)
        post = await info.context.service(PostService).get_post(space_user, post_id)
        reply = await info.context.service(ReplyService).get_reply(post, reply_id)
        try:
            reaction = await info.context.service(ReactionService).create_reply_reaction(
                space_user, post, reply, value
            )
        except ValidationError as exc:
            return ReplyReactionPayload.failed(exc)
        return _ok(
            ReplyReactionPayload,
            post=Post.from_entity(post),
            reply=Reply.from_entity(reply),
            reaction=ReplyReaction.from_entity(reaction),
        )

    @strawberry.mutation
    async def delete_reply_reaction(
        self, info: Info, space_id: strawberry.ID, post_id: strawberry.ID, reply_id: strawberry.ID, value: str
    ) -> ReplyReactionPayload:
        space_user = await info.context.space_user(space_id)
        post = await info.context.service(PostService).get_post(space_user, post_id)
        reply = await info.context.service(ReplyService).get_reply(post, reply_id)
        try:
            reaction = await info.context.service(ReactionService).delete_reply_reaction(
                space_user, post, reply, value
            )
        except ValidationError as exc:
            return ReplyReactionPayload.failed(exc)
        return _ok(
            ReplyReactionPayload,
            post=Post.from_entity(post),
            reply=Reply.from_entity(reply),
            reaction=ReplyReaction.from_entity(reaction),
        )

    # Notifications and nudges

    @strawberry.mutation
    async def dismiss_notifications(self, info: Info, topic: Optional[str] = None) -> DismissNotificationsPayload:
        viewer = await info.context.viewer()
        dismissed = await info.context.service(NotificationService).dismiss(viewer, topic)
        return _ok(DismissNotificationsPayload, topic=dismissed)

    @strawberry.mutation
    async def create_nudge(self, info: Info, space_id: strawberry.ID, minute: int) -> NudgePayload:
        space_user = await info.context.space_user(space_id)
        try:
            nudge = await info.context.service(DigestService).create_nudge(space_user, minute)
        except ValidationError as exc:
            return NudgePayload.failed(exc)
        return _ok(NudgePayload, nudge=Nudge.from_entity(nudge))

    @strawberry.mutation
    async def delete_nudge(self, info: Info, space_id: strawberry.ID, nudge_id: strawberry.ID) -> NudgePayload:
        space_user = await info.context.space_user(space_id)
        nudge = await info.context.service(DigestService).delete_nudge(space_user, nudge_id)
        return _ok(NudgePayload, nudge=Nudge.from_entity(nudge))
