"""
Group service.

Covers group lifecycle (create, edit, close, reopen), membership,
watching and bookmarks. Groups the acting member cannot see are reported
as missing.
"""

from __future__ import annotations

from typing import List, Optional

from sqlmodel import select

from level.core.database.entities import Group, GroupBookmark, GroupUser, SpaceUser
from level.core.database.pagination import OrderDirection, Page, PageArgs, paginate
from level.core.database.repositories import visible_group_ids
from level.core.errors import ForbiddenError, NotFoundError, ValidationError
from level.core.logging_config import get_logger
from level.core.models.domain.enums import GroupRole, GroupState
from level.core.models.io import GroupCreate, GroupUpdate, validate

from .base import BaseService
from .events import Event, group_topic, space_user_topic

logger = get_logger(__name__)


class GroupService(BaseService):
    """Service for groups and group memberships."""

    async def get_group(self, space_user: SpaceUser, group_id: str) -> Group:
        group = await self.repos.groups.get_visible(space_user, group_id)
        if group is None:
            raise NotFoundError("Group")
        return group

    async def _can_manage(self, space_user: SpaceUser, group: Group) -> bool:
        if space_user.is_admin:
            return True
        membership = await self.repos.group_users.get_membership(group.id, space_user.id)
        return membership is not None and membership.role == GroupRole.OWNER

    async def _require_manager(self, space_user: SpaceUser, group: Group) -> None:
        if not await self._can_manage(space_user, group):
            raise ForbiddenError()

    async def create_group(
        self,
        space_user: SpaceUser,
        *,
        name: str,
        description: Optional[str] = None,
        is_private: bool = False,
    ) -> Group:
        """Create a group; the creator becomes its owner and bookmarks it."""
        data = validate(GroupCreate, name=name, description=description, is_private=is_private)
        if await self.repos.groups.get_by_name(space_user.space_id, data.name) is not None:
            raise ValidationError.single("name", "has already been taken")

        group = await self.repos.groups.create(
            Group(
                space_id=space_user.space_id,
                creator_id=space_user.id,
                name=data.name,
                description=data.description,
                is_private=data.is_private,
            )
        )
        await self.repos.group_users.create(
            GroupUser(space_id=group.space_id, group_id=group.id, space_user_id=space_user.id, role=GroupRole.OWNER)
        )
        await self.repos.group_bookmarks.create(
            GroupBookmark(space_id=group.space_id, group_id=group.id, space_user_id=space_user.id)
        )
        self.emit(space_user_topic(space_user.id), Event("GROUP_BOOKMARKED", {"group": group}))
        await self.commit()
        logger.info(f"Created group {group.id} ({group.name}) in space {group.space_id}")
        return group

    async def update_group(
        self,
        space_user: SpaceUser,
        group: Group,
        *,
        name: Optional[str] = None,
        description: Optional[str] = None,
        is_private: Optional[bool] = None,
    ) -> Group:
        await self._require_manager(space_user, group)
        data = validate(GroupUpdate, name=name, description=description, is_private=is_private)

        if data.name is not None and data.name.lower() != group.name.lower():
            other = await self.repos.groups.get_by_name(group.space_id, data.name)
            if other is not None and other.id != group.id:
                raise ValidationError.single("name", "has already been taken")
        for field in ("name", "description", "is_private"):
            value = getattr(data, field)
            if value is not None:
                setattr(group, field, value)

        await self.repos.groups.update(group)
        self.emit(group_topic(group.id), Event("GROUP_UPDATED", {"group": group}))
        await self.commit()
        return group

    async def _set_state(self, space_user: SpaceUser, group: Group, state: GroupState) -> Group:
        await self._require_manager(space_user, group)
        if group.state != state:
            group.state = state
            await self.repos.groups.update(group)
            self.emit(group_topic(group.id), Event("GROUP_UPDATED", {"group": group}))
            await self.commit()
            logger.info(f"Group {group.id} is now {state.value}")
        return group

    async def close_group(self, space_user: SpaceUser, group: Group) -> Group:
        return await self._set_state(space_user, group, GroupState.CLOSED)

    async def reopen_group(self, space_user: SpaceUser, group: Group) -> Group:
        return await self._set_state(space_user, group, GroupState.OPEN)

    async def subscribe(self, space_user: SpaceUser, group: Group) -> GroupUser:
        """Join a group as a member; joining twice keeps the existing membership."""
        membership = await self.repos.group_users.get_membership(group.id, space_user.id)
        if membership is not None:
            return membership
        if group.is_private:
            # Non-members of a private group never got hold of it through get_group
            raise NotFoundError("Group")

        membership = await self.repos.group_users.create(
            GroupUser(space_id=group.space_id, group_id=group.id, space_user_id=space_user.id)
        )
        self.emit(space_user_topic(space_user.id), Event("SUBSCRIBED_TO_GROUP", {"group": group}))
        self.emit(group_topic(group.id), Event("GROUP_MEMBERSHIP_UPDATED", {"group": group, "space_user": space_user}))
        await self.commit()
        return membership

    async def unsubscribe(self, space_user: SpaceUser, group: Group) -> Group:
        membership = await self.repos.group_users.get_membership(group.id, space_user.id)
        if membership is not None:
            await self.repos.group_users.delete(membership.id)
            self.emit(space_user_topic(space_user.id), Event("UNSUBSCRIBED_FROM_GROUP", {"group": group}))
            self.emit(
                group_topic(group.id), Event("GROUP_MEMBERSHIP_UPDATED", {"group": group, "space_user": space_user})
            )
            await self.commit()
        return group

    async def watch(self, space_user: SpaceUser, group: Group) -> GroupUser:
        """Watch a group, joining it first when needed."""
        membership = await self.repos.group_users.get_membership(group.id, space_user.id)
        if membership is None:
            membership = await self.subscribe(space_user, group)
        if not membership.is_watching:
            membership.is_watching = True
            await self.repos.group_users.update(membership)
            self.emit(
                group_topic(group.id), Event("GROUP_MEMBERSHIP_UPDATED", {"group": group, "space_user": space_user})
            )
            await self.commit()
        return membership

    async def unwatch(self, space_user: SpaceUser, group: Group) -> Group:
        membership = await self.repos.group_users.get_membership(group.id, space_user.id)
        if membership is not None and membership.is_watching:
            membership.is_watching = False
            await self.repos.group_users.update(membership)
            self.emit(
                group_topic(group.id), Event("GROUP_MEMBERSHIP_UPDATED", {"group": group, "space_user": space_user})
            )
            await self.commit()
        return group

    async def bookmark(self, space_user: SpaceUser, group: Group) -> Group:
        if await self.repos.group_bookmarks.get_bookmark(group.id, space_user.id) is None:
            await self.repos.group_bookmarks.create(
                GroupBookmark(space_id=group.space_id, group_id=group.id, space_user_id=space_user.id)
            )
            self.emit(space_user_topic(space_user.id), Event("GROUP_BOOKMARKED", {"group": group}))
            await self.commit()
        return group

    async def unbookmark(self, space_user: SpaceUser, group: Group) -> Group:
        bookmark = await self.repos.group_bookmarks.get_bookmark(group.id, space_user.id)
        if bookmark is not None:
            await self.repos.group_bookmarks.delete(bookmark.id)
            self.emit(space_user_topic(space_user.id), Event("GROUP_UNBOOKMARKED", {"group": group}))
            await self.commit()
        return group

    async def list_bookmarks(self, space_user: SpaceUser) -> List[Group]:
        return await self.repos.group_bookmarks.list_groups(space_user)

    async def is_bookmarked(self, space_user: SpaceUser, group: Group) -> bool:
        return await self.repos.group_bookmarks.get_bookmark(group.id, space_user.id) is not None

    async def get_membership(self, space_user: SpaceUser, group: Group) -> Optional[GroupUser]:
        return await self.repos.group_users.get_membership(group.id, space_user.id)

    async def list_groups(
        self, space_user: SpaceUser, args: PageArgs, *, state: Optional[GroupState] = None
    ) -> Page:
        """Visible groups of the space ordered by name."""
        stmt = select(Group).where(Group.id.in_(visible_group_ids(space_user)))
        if state is not None:
            stmt = stmt.where(Group.state == state)
        return await paginate(
            self.session, stmt, order_column=Group.name, id_column=Group.id, args=args, direction=OrderDirection.ASC
        )

    async def list_memberships(self, group: Group, args: PageArgs) -> Page:
        stmt = select(GroupUser).where(GroupUser.group_id == group.id)
        return await paginate(
            self.session,
            stmt,
            order_column=GroupUser.inserted_at,
            id_column=GroupUser.id,
            args=args,
            direction=OrderDirection.ASC,
        )
