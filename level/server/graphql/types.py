"""
GraphQL object types.

Every type keeps the entity it was built from in a private ``entity`` field;
relations and viewer-dependent fields are resolved on demand through the
request context.
"""

import datetime
from typing import Callable, Generic, List, Optional, TypeVar

import strawberry
from strawberry.scalars import JSON
from strawberry.types import Info

from level.core.database import entities as db
from level.core.database.pagination import OrderDirection as PageOrderDirection
from level.core.database.pagination import Page, PageArgs
from level.core.errors import FieldError, ValidationError
from level.core.models.domain import enums
from level.server.services import (
    DigestService,
    GroupService,
    MentionService,
    PostService,
    ReactionService,
    ReplyService,
    SpaceService,
    render_body,
)

# ---------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------

UserState = strawberry.enum(enums.UserState)
SpaceState = strawberry.enum(enums.SpaceState)
SpaceUserRole = strawberry.enum(enums.SpaceUserRole)
SpaceUserState = strawberry.enum(enums.SpaceUserState)
GroupState = strawberry.enum(enums.GroupState)
GroupRole = strawberry.enum(enums.GroupRole)
PostState = strawberry.enum(enums.PostState)
InboxState = strawberry.enum(enums.InboxState)
SubscriptionState = strawberry.enum(enums.SubscriptionState)
NotificationEvent = strawberry.enum(enums.NotificationEvent)
NotificationState = strawberry.enum(enums.NotificationState)
InboxStateFilter = strawberry.enum(enums.InboxFilter, name="InboxStateFilter")
PostStateFilter = strawberry.enum(enums.PostStateFilter)
FollowingStateFilter = strawberry.enum(enums.FollowingFilter, name="FollowingStateFilter")
PostOrderField = strawberry.enum(enums.PostOrderField)
OrderDirection = strawberry.enum(PageOrderDirection, name="OrderDirection")


# ---------------------------------------------------------------------
# Connections
# ---------------------------------------------------------------------

NodeType = TypeVar("NodeType")


@strawberry.type
class PageInfo:
    has_next_page: bool
    has_previous_page: bool
    start_cursor: Optional[str]
    end_cursor: Optional[str]


@strawberry.type
class Edge(Generic[NodeType]):
    node: NodeType
    cursor: str


@strawberry.type
class Connection(Generic[NodeType]):
    edges: List[Edge[NodeType]]
    nodes: List[NodeType]
    page_info: PageInfo
    total_count: int


def to_connection(page: Page, convert: Callable) -> Connection:
    edges = [Edge(node=convert(edge.node), cursor=edge.cursor) for edge in page.edges]
    return Connection(
        edges=edges,
        nodes=[edge.node for edge in edges],
        page_info=PageInfo(
            has_next_page=page.page_info.has_next_page,
            has_previous_page=page.page_info.has_previous_page,
            start_cursor=page.page_info.start_cursor,
            end_cursor=page.page_info.end_cursor,
        ),
        total_count=page.total_count,
    )


def page_args(
    first: Optional[int] = None,
    after: Optional[str] = None,
    last: Optional[int] = None,
    before: Optional[str] = None,
) -> PageArgs:
    return PageArgs(first=first, after=after, last=last, before=before)


# ---------------------------------------------------------------------
# Inputs and errors
# ---------------------------------------------------------------------


@strawberry.input
class PostFilters:
    inbox_state: InboxStateFilter = InboxStateFilter.ALL
    state: PostStateFilter = PostStateFilter.ALL
    following_state: FollowingStateFilter = FollowingStateFilter.ALL


@strawberry.input
class PostOrder:
    field: PostOrderField = PostOrderField.POSTED_AT
    direction: OrderDirection = OrderDirection.DESC


@strawberry.type(name="ValidationError")
class ValidationErrorType:
    """Validation failure on one input attribute."""

    attribute: str
    message: str

    @classmethod
    def from_field_error(cls, error: FieldError) -> "ValidationErrorType":
        return cls(attribute=error.attribute, message=error.message)


@strawberry.type
class MutationPayload:
    success: bool
    errors: List[ValidationErrorType]

    @classmethod
    def failed(cls, exc: ValidationError):
        return cls(success=False, errors=[ValidationErrorType.from_field_error(e) for e in exc.errors])


# ---------------------------------------------------------------------
# Accounts and spaces
# ---------------------------------------------------------------------


@strawberry.type
class User:
    id: strawberry.ID
    email: str
    first_name: str
    last_name: str
    handle: str
    time_zone: str
    state: UserState
    inserted_at: datetime.datetime
    entity: strawberry.Private[db.User]

    @classmethod
    def from_entity(cls, user: db.User) -> "User":
        return cls(
            id=strawberry.ID(user.id),
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            handle=user.handle,
            time_zone=user.time_zone,
            state=user.state,
            inserted_at=user.inserted_at,
            entity=user,
        )

    @strawberry.field
    def display_name(self) -> str:
        return self.entity.display_name

    @strawberry.field
    async def spaces(self, info: Info) -> List["Space"]:
        spaces = await info.context.service(SpaceService).list_spaces(self.entity)
        return [Space.from_entity(space) for space in spaces]


@strawberry.type
class Space:
    id: strawberry.ID
    name: str
    slug: str
    state: SpaceState
    inserted_at: datetime.datetime
    entity: strawberry.Private[db.Space]

    @classmethod
    def from_entity(cls, space: db.Space) -> "Space":
        return cls(
            id=strawberry.ID(space.id),
            name=space.name,
            slug=space.slug,
            state=space.state,
            inserted_at=space.inserted_at,
            entity=space,
        )

    @strawberry.field(description="Token of the open invitation link; only shown to owners and admins")
    async def open_invitation_token(self, info: Info) -> Optional[str]:
        space_user = await info.context.space_user(self.entity.id)
        if not space_user.is_admin:
            return None
        invitation = await info.context.service(SpaceService).get_open_invitation(space_user)
        return invitation.token if invitation is not None else None

    @strawberry.field(description="The viewer's membership")
    async def space_user(self, info: Info) -> "SpaceUser":
        return SpaceUser.from_entity(await info.context.space_user(self.entity.id))

    @strawberry.field
    async def space_users(
        self,
        info: Info,
        first: Optional[int] = None,
        after: Optional[str] = None,
        last: Optional[int] = None,
        before: Optional[str] = None,
    ) -> "Connection[SpaceUser]":
        space_user = await info.context.space_user(self.entity.id)
        page = await info.context.service(SpaceService).list_space_users(
            space_user, page_args(first, after, last, before)
        )
        return to_connection(page, SpaceUser.from_entity)

    @strawberry.field
    async def groups(
        self,
        info: Info,
        first: Optional[int] = None,
        after: Optional[str] = None,
        last: Optional[int] = None,
        before: Optional[str] = None,
        state: Optional[GroupState] = None,
    ) -> "Connection[Group]":
        space_user = await info.context.space_user(self.entity.id)
        page = await info.context.service(GroupService).list_groups(
            space_user, page_args(first, after, last, before), state=state
        )
        return to_connection(page, Group.from_entity)

    @strawberry.field
    async def bookmarks(self, info: Info) -> List["Group"]:
        space_user = await info.context.space_user(self.entity.id)
        groups = await info.context.service(GroupService).list_bookmarks(space_user)
        return [Group.from_entity(group) for group in groups]

    @strawberry.field
    async def posts(
        self,
        info: Info,
        first: Optional[int] = None,
        after: Optional[str] = None,
        last: Optional[int] = None,
        before: Optional[str] = None,
        filter: Optional[PostFilters] = None,
        order_by: Optional[PostOrder] = None,
    ) -> "Connection[Post]":
        space_user = await info.context.space_user(self.entity.id)
        return await list_posts(info, space_user, page_args(first, after, last, before), None, filter, order_by)


async def list_posts(
    info: Info,
    space_user: db.SpaceUser,
    args: PageArgs,
    group: Optional[db.Group],
    filters: Optional[PostFilters],
    order_by: Optional[PostOrder],
) -> "Connection[Post]":
    filters = filters or PostFilters()
    order_by = order_by or PostOrder()
    page = await info.context.service(PostService).list_posts(
        space_user,
        args,
        group=group,
        inbox=enums.InboxFilter(filters.inbox_state.value),
        state=enums.PostStateFilter(filters.state.value),
        following=enums.FollowingFilter(filters.following_state.value),
        order_field=enums.PostOrderField(order_by.field.value),
        direction=PageOrderDirection(order_by.direction.value),
    )
    return to_connection(page, Post.from_entity)


@strawberry.type
class SpaceUser:
    id: strawberry.ID
    space_id: strawberry.ID
    role: SpaceUserRole
    state: SpaceUserState
    first_name: str
    last_name: str
    handle: str
    entity: strawberry.Private[db.SpaceUser]

    @classmethod
    def from_entity(cls, space_user: db.SpaceUser) -> "SpaceUser":
        return cls(
            id=strawberry.ID(space_user.id),
            space_id=strawberry.ID(space_user.space_id),
            role=space_user.role,
            state=space_user.state,
            first_name=space_user.first_name,
            last_name=space_user.last_name,
            handle=space_user.handle,
            entity=space_user,
        )

    @strawberry.field
    def display_name(self) -> str:
        return self.entity.display_name

    @strawberry.field
    async def space(self, info: Info) -> Space:
        space = await info.context.repos.spaces.get_by_id(self.entity.space_id)
        return Space.from_entity(space)

    @strawberry.field(description="Digest schedule; empty unless this is the viewer's own membership")
    async def nudges(self, info: Info) -> List["Nudge"]:
        viewer = await info.context.viewer()
        if viewer.id != self.entity.user_id:
            return []
        nudges = await info.context.service(DigestService).list_nudges(self.entity)
        return [Nudge.from_entity(nudge) for nudge in nudges]


# ---------------------------------------------------------------------
# Groups
# ---------------------------------------------------------------------


@strawberry.type
class Group:
    id: strawberry.ID
    space_id: strawberry.ID
    name: str
    description: Optional[str]
    is_private: bool
    is_default: bool
    state: GroupState
    inserted_at: datetime.datetime
    entity: strawberry.Private[db.Group]

    @classmethod
    def from_entity(cls, group: db.Group) -> "Group":
        return cls(
            id=strawberry.ID(group.id),
            space_id=strawberry.ID(group.space_id),
            name=group.name,
            description=group.description,
            is_private=group.is_private,
            is_default=group.is_default,
            state=group.state,
            inserted_at=group.inserted_at,
            entity=group,
        )

    @strawberry.field
    async def creator(self, info: Info) -> SpaceUser:
        return SpaceUser.from_entity(await info.context.repos.space_users.get_by_id(self.entity.creator_id))

    @strawberry.field
    async def is_bookmarked(self, info: Info) -> bool:
        space_user = await info.context.space_user(self.entity.space_id)
        return await info.context.service(GroupService).is_bookmarked(space_user, self.entity)

    @strawberry.field(description="The viewer's membership, if any")
    async def membership(self, info: Info) -> Optional["GroupMembership"]:
        space_user = await info.context.space_user(self.entity.space_id)
        membership = await info.context.service(GroupService).get_membership(space_user, self.entity)
        return GroupMembership.from_entity(membership) if membership is not None else None

    @strawberry.field
    async def memberships(
        self,
        info: Info,
        first: Optional[int] = None,
        after: Optional[str] = None,
        last: Optional[int] = None,
        before: Optional[str] = None,
    ) -> "Connection[GroupMembership]":
        page = await info.context.service(GroupService).list_memberships(
            self.entity, page_args(first, after, last, before)
        )
        return to_connection(page, GroupMembership.from_entity)

    @strawberry.field
    async def posts(
        self,
        info: Info,
        first: Optional[int] = None,
        after: Optional[str] = None,
        last: Optional[int] = None,
        before: Optional[str] = None,
        filter: Optional[PostFilters] = None,
        order_by: Optional[PostOrder] = None,
    ) -> "Connection[Post]":
        space_user = await info.context.space_user(self.entity.space_id)
        return await list_posts(
            info, space_user, page_args(first, after, last, before), self.entity, filter, order_by
        )


@strawberry.type
class GroupMembership:
    role: GroupRole
    is_watching: bool
    entity: strawberry.Private[db.GroupUser]

    @classmethod
    def from_entity(cls, membership: db.GroupUser) -> "GroupMembership":
        return cls(role=membership.role, is_watching=membership.is_watching, entity=membership)

    @strawberry.field
    async def group(self, info: Info) -> Group:
        return Group.from_entity(await info.context.repos.groups.get_by_id(self.entity.group_id))

    @strawberry.field
    async def space_user(self, info: Info) -> SpaceUser:
        return SpaceUser.from_entity(await info.context.repos.space_users.get_by_id(self.entity.space_user_id))


# ---------------------------------------------------------------------
# Posts and replies
# ---------------------------------------------------------------------


@strawberry.type
class Post:
    id: strawberry.ID
    space_id: strawberry.ID
    body: str
    state: PostState
    posted_at: datetime.datetime
    last_activity_at: datetime.datetime
    entity: strawberry.Private[db.Post]

    @classmethod
    def from_entity(cls, post: db.Post) -> "Post":
        return cls(
            id=strawberry.ID(post.id),
            space_id=strawberry.ID(post.space_id),
            body=post.body,
            state=post.state,
            posted_at=post.inserted_at,
            last_activity_at=post.last_activity_at,
            entity=post,
        )

    @strawberry.field
    def body_html(self) -> str:
        return render_body(self.entity.body)

    @strawberry.field
    async def author(self, info: Info) -> SpaceUser:
        return SpaceUser.from_entity(await info.context.repos.space_users.get_by_id(self.entity.space_user_id))

    @strawberry.field(description="Groups of the post the viewer can see")
    async def groups(self, info: Info) -> List[Group]:
        space_user = await info.context.space_user(self.entity.space_id)
        groups = []
        for group in await info.context.repos.groups.list_for_post(self.entity.id):
            if await info.context.repos.groups.get_visible(space_user, group.id) is not None:
                groups.append(Group.from_entity(group))
        return groups

    @strawberry.field
    async def replies(
        self,
        info: Info,
        first: Optional[int] = None,
        after: Optional[str] = None,
        last: Optional[int] = None,
        before: Optional[str] = None,
    ) -> "Connection[Reply]":
        page = await info.context.service(ReplyService).list_replies(
            self.entity, page_args(first, after, last, before)
        )
        return to_connection(page, Reply.from_entity)

    @strawberry.field
    async def reply_count(self, info: Info) -> int:
        return await info.context.service(ReplyService).count_replies(self.entity)

    @strawberry.field
    async def subscription_state(self, info: Info) -> SubscriptionState:
        space_user = await info.context.space_user(self.entity.space_id)
        post_user = await info.context.service(PostService).get_post_user(space_user, self.entity)
        return post_user.subscription_state if post_user is not None else SubscriptionState.NOT_SUBSCRIBED

    @strawberry.field
    async def inbox_state(self, info: Info) -> InboxState:
        space_user = await info.context.space_user(self.entity.space_id)
        post_user = await info.context.service(PostService).get_post_user(space_user, self.entity)
        return post_user.inbox_state if post_user is not None else InboxState.EXCLUDED

    @strawberry.field
    async def has_reacted(self, info: Info) -> bool:
        space_user = await info.context.space_user(self.entity.space_id)
        return await info.context.service(ReactionService).has_reacted_to_post(space_user, self.entity)

    @strawberry.field
    async def reactions(self, info: Info) -> List["PostReaction"]:
        reactions = await info.context.service(ReactionService).list_post_reactions(self.entity)
        return [PostReaction.from_entity(reaction) for reaction in reactions]

    @strawberry.field(description="The viewer's undismissed mentions in this post")
    async def mentions(self, info: Info) -> List["Mention"]:
        space_user = await info.context.space_user(self.entity.space_id)
        mentions = await info.context.service(MentionService).list_mentions(space_user, self.entity)
        return [Mention.from_entity(mention) for mention in mentions]


@strawberry.type
class Reply:
    id: strawberry.ID
    post_id: strawberry.ID
    body: str
    posted_at: datetime.datetime
    entity: strawberry.Private[db.Reply]

    @classmethod
    def from_entity(cls, reply: db.Reply) -> "Reply":
        return cls(
            id=strawberry.ID(reply.id),
            post_id=strawberry.ID(reply.post_id),
            body=reply.body,
            posted_at=reply.inserted_at,
            entity=reply,
        )

    @strawberry.field
    def body_html(self) -> str:
        return render_body(self.entity.body)

    @strawberry.field
    async def author(self, info: Info) -> SpaceUser:
        return SpaceUser.from_entity(await info.context.repos.space_users.get_by_id(self.entity.space_user_id))

    @strawberry.field
    async def post(self, info: Info) -> Post:
        return Post.from_entity(await info.context.repos.posts.get_by_id(self.entity.post_id))

    @strawberry.field
    async def has_viewed(self, info: Info) -> bool:
        space_user = await info.context.space_user(self.entity.space_id)
        return await info.context.service(ReplyService).has_viewed(space_user, self.entity)

    @strawberry.field
    async def has_reacted(self, info: Info) -> bool:
        space_user = await info.context.space_user(self.entity.space_id)
        return await info.context.service(ReactionService).has_reacted_to_reply(space_user, self.entity)

    @strawberry.field
    async def reactions(self, info: Info) -> List["ReplyReaction"]:
        reactions = await info.context.service(ReactionService).list_reply_reactions(self.entity)
        return [ReplyReaction.from_entity(reaction) for reaction in reactions]


@strawberry.type
class PostReaction:
    id: strawberry.ID
    value: str
    entity: strawberry.Private[db.PostReaction]

    @classmethod
    def from_entity(cls, reaction: db.PostReaction) -> "PostReaction":
        return cls(id=strawberry.ID(reaction.id), value=reaction.value, entity=reaction)

    @strawberry.field
    async def space_user(self, info: Info) -> SpaceUser:
        return SpaceUser.from_entity(await info.context.repos.space_users.get_by_id(self.entity.space_user_id))

    @strawberry.field
    async def post(self, info: Info) -> Post:
        return Post.from_entity(await info.context.repos.posts.get_by_id(self.entity.post_id))


@strawberry.type
class ReplyReaction:
    id: strawberry.ID
    value: str
    entity: strawberry.Private[db.ReplyReaction]

    @classmethod
    def from_entity(cls, reaction: db.ReplyReaction) -> "ReplyReaction":
        return cls(id=strawberry.ID(reaction.id), value=reaction.value, entity=reaction)

    @strawberry.field
    async def space_user(self, info: Info) -> SpaceUser:
        return SpaceUser.from_entity(await info.context.repos.space_users.get_by_id(self.entity.space_user_id))

    @strawberry.field
    async def reply(self, info: Info) -> Reply:
        return Reply.from_entity(await info.context.repos.replies.get_by_id(self.entity.reply_id))


@strawberry.type
class Mention:
    id: strawberry.ID
    occurred_at: datetime.datetime
    entity: strawberry.Private[db.UserMention]

    @classmethod
    def from_entity(cls, mention: db.UserMention) -> "Mention":
        return cls(id=strawberry.ID(mention.id), occurred_at=mention.occurred_at, entity=mention)

    @strawberry.field
    async def mentioner(self, info: Info) -> SpaceUser:
        return SpaceUser.from_entity(await info.context.repos.space_users.get_by_id(self.entity.mentioner_id))

    @strawberry.field
    async def reply(self, info: Info) -> Optional[Reply]:
        if self.entity.reply_id is None:
            return None
        reply = await info.context.repos.replies.get_by_id(self.entity.reply_id)
        return Reply.from_entity(reply) if reply is not None and not reply.is_deleted else None


# ---------------------------------------------------------------------
# Notifications, nudges and digests
# ---------------------------------------------------------------------


@strawberry.type
class Notification:
    id: strawberry.ID
    topic: str
    event: NotificationEvent
    state: NotificationState
    data: JSON
    occurred_at: datetime.datetime
    entity: strawberry.Private[db.Notification]

    @classmethod
    def from_entity(cls, notification: db.Notification) -> "Notification":
        return cls(
            id=strawberry.ID(notification.id),
            topic=notification.topic,
            event=notification.event,
            state=notification.state,
            data=notification.data,
            occurred_at=notification.inserted_at,
            entity=notification,
        )


@strawberry.type
class Nudge:
    id: strawberry.ID
    minute: int

    @classmethod
    def from_entity(cls, nudge: db.Nudge) -> "Nudge":
        return cls(id=strawberry.ID(nudge.id), minute=nudge.minute)


@strawberry.type
class DigestSection:
    id: strawberry.ID
    title: str
    summary: Optional[str]
    link_text: Optional[str]
    link_url: Optional[str]
    rank: int
    entity: strawberry.Private[db.DigestSection]

    @classmethod
    def from_entity(cls, section: db.DigestSection) -> "DigestSection":
        return cls(
            id=strawberry.ID(section.id),
            title=section.title,
            summary=section.summary,
            link_text=section.link_text,
            link_url=section.link_url,
            rank=section.rank,
            entity=section,
        )

    @strawberry.field
    async def posts(self, info: Info) -> List[Post]:
        posts = await info.context.service(DigestService).list_section_posts(self.entity)
        return [Post.from_entity(post) for post in posts]


@strawberry.type
class Digest:
    id: strawberry.ID
    key: str
    title: str
    subject: str
    time_zone: str
    start_at: datetime.datetime
    end_at: datetime.datetime
    entity: strawberry.Private[db.Digest]

    @classmethod
    def from_entity(cls, digest: db.Digest) -> "Digest":
        return cls(
            id=strawberry.ID(digest.id),
            key=digest.key,
            title=digest.title,
            subject=digest.subject,
            time_zone=digest.time_zone,
            start_at=digest.start_at,
            end_at=digest.end_at,
            entity=digest,
        )

    @strawberry.field
    async def sections(self, info: Info) -> List[DigestSection]:
        sections = await info.context.service(DigestService).list_sections(self.entity)
        return [DigestSection.from_entity(section) for section in sections]
