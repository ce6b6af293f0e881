"""
GraphQL query root.
"""

from typing import Optional

import strawberry
from strawberry.types import Info

from level.core.errors import NotFoundError
from level.server.services import (
    DigestService,
    GroupService,
    NotificationService,
    PostService,
    SearchService,
    SpaceService,
)

from .types import (
    Connection,
    Digest,
    Group,
    Notification,
    NotificationState,
    Post,
    Space,
    SpaceUser,
    User,
    page_args,
    to_connection,
)


@strawberry.type
class Query:
    @strawberry.field(description="The authenticated user")
    async def viewer(self, info: Info) -> User:
        return User.from_entity(await info.context.viewer())

    @strawberry.field(description="Look up a space of the viewer by id or slug")
    async def space(
        self, info: Info, id: Optional[strawberry.ID] = None, slug: Optional[str] = None
    ) -> Space:
        if id is None and slug is None:
            raise NotFoundError("Space")
        viewer = await info.context.viewer()
        space = await info.context.service(SpaceService).get_space(viewer, space_id=id, slug=slug)
        return Space.from_entity(space)

    @strawberry.field(description="The viewer's membership in a space")
    async def space_user(self, info: Info, space_id: strawberry.ID) -> SpaceUser:
        return SpaceUser.from_entity(await info.context.space_user(space_id))

    @strawberry.field
    async def group(self, info: Info, space_id: strawberry.ID, id: strawberry.ID) -> Group:
        space_user = await info.context.space_user(space_id)
        return Group.from_entity(await info.context.service(GroupService).get_group(space_user, id))

    @strawberry.field
    async def post(self, info: Info, space_id: strawberry.ID, id: strawberry.ID) -> Post:
        space_user = await info.context.space_user(space_id)
        return Post.from_entity(await info.context.service(PostService).get_post(space_user, id))

    @strawberry.field(description="Posts whose body or replies contain the query")
    async def search(
        self,
        info: Info,
        space_id: strawberry.ID,
        query: str,
        first: Optional[int] = None,
        after: Optional[str] = None,
    ) -> Connection[Post]:
        space_user = await info.context.space_user(space_id)
        page = await info.context.service(SearchService).search_posts(space_user, query, first=first, after=after)
        return to_connection(page, Post.from_entity)

    @strawberry.field(description="The viewer's notifications across spaces, newest first")
    async def notifications(
        self,
        info: Info,
        state: Optional[NotificationState] = None,
        first: Optional[int] = None,
        after: Optional[str] = None,
    ) -> Connection[Notification]:
        viewer = await info.context.viewer()
        page = await info.context.service(NotificationService).list_notifications(
            viewer, page_args(first, after), state=state
        )
        return to_connection(page, Notification.from_entity)

    @strawberry.field
    async def digest(self, info: Info, space_id: strawberry.ID, id: strawberry.ID) -> Digest:
        space_user = await info.context.space_user(space_id)
        return Digest.from_entity(await info.context.service(DigestService).get_digest(space_user, id))
