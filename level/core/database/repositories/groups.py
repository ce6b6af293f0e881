"""
Group, group membership and bookmark repositories.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import func, or_
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..entities.groups import Group, GroupBookmark, GroupUser
from ..entities.posts import PostGroup
from ..entities.spaces import SpaceUser
from .base import AsyncBaseRepository


def visible_group_ids(space_user: SpaceUser):
    """Select the ids of groups ``space_user`` can see.

    Public groups of the space are visible to every member; private groups
    only to their members.
    """
    member_of = select(GroupUser.group_id).where(GroupUser.space_user_id == space_user.id)
    return select(Group.id).where(
        Group.space_id == space_user.space_id,
        or_(Group.is_private == False, Group.id.in_(member_of)),  # noqa: E712
    )


class GroupRepository(AsyncBaseRepository[Group]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Group)

    async def get_by_name(self, space_id: str, name: str) -> Optional[Group]:
        stmt = select(Group).where(Group.space_id == space_id, func.lower(Group.name) == name.strip().lower())
        result = await self.session.exec(stmt)
        return result.first()

    async def get_visible(self, space_user: SpaceUser, group_id: str) -> Optional[Group]:
        stmt = select(Group).where(Group.id == group_id, Group.id.in_(visible_group_ids(space_user)))
        result = await self.session.exec(stmt)
        return result.first()

    async def list_defaults(self, space_id: str) -> List[Group]:
        stmt = select(Group).where(Group.space_id == space_id, Group.is_default == True)  # noqa: E712
        result = await self.session.exec(stmt)
        return list(result.all())

    async def list_for_post(self, post_id: str) -> List[Group]:
        stmt = (
            select(Group)
            .join(PostGroup, PostGroup.group_id == Group.id)
            .where(PostGroup.post_id == post_id)
            .order_by(Group.name.asc())
        )
        result = await self.session.exec(stmt)
        return list(result.all())


class GroupUserRepository(AsyncBaseRepository[GroupUser]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, GroupUser)

    async def get_membership(self, group_id: str, space_user_id: str) -> Optional[GroupUser]:
        stmt = select(GroupUser).where(GroupUser.group_id == group_id, GroupUser.space_user_id == space_user_id)
        result = await self.session.exec(stmt)
        return result.first()

    async def list_for_group(self, group_id: str) -> List[GroupUser]:
        stmt = select(GroupUser).where(GroupUser.group_id == group_id).order_by(GroupUser.inserted_at.asc())
        result = await self.session.exec(stmt)
        return list(result.all())

    async def list_watchers(self, group_id: str) -> List[GroupUser]:
        stmt = select(GroupUser).where(GroupUser.group_id == group_id, GroupUser.is_watching == True)  # noqa: E712
        result = await self.session.exec(stmt)
        return list(result.all())

    async def list_space_user_ids_for_group(self, group_id: str) -> List[str]:
        result = await self.session.exec(select(GroupUser.space_user_id).where(GroupUser.group_id == group_id))
        return list(result.all())


class GroupBookmarkRepository(AsyncBaseRepository[GroupBookmark]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, GroupBookmark)

    async def get_bookmark(self, group_id: str, space_user_id: str) -> Optional[GroupBookmark]:
        stmt = select(GroupBookmark).where(
            GroupBookmark.group_id == group_id, GroupBookmark.space_user_id == space_user_id
        )
        result = await self.session.exec(stmt)
        return result.first()

    async def list_groups(self, space_user: SpaceUser) -> List[Group]:
        """Bookmarked groups that are still visible to the member, ordered by name."""
        stmt = (
            select(Group)
            .join(GroupBookmark, GroupBookmark.group_id == Group.id)
            .where(
                GroupBookmark.space_user_id == space_user.id,
                Group.id.in_(visible_group_ids(space_user)),
            )
            .order_by(Group.name.asc())
        )
        result = await self.session.exec(stmt)
        return list(result.all())
