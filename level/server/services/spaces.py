"""
Space service.

Spaces are entered through their membership rows: every space-scoped
operation starts by resolving the acting user's ``SpaceUser`` with
``require_space_user`` and fails with ``NotFoundError`` when the user is not
an active member, so the existence of foreign spaces never leaks.
"""

from __future__ import annotations

import secrets
from typing import List, Optional, Tuple

from sqlmodel import select

from level.core.database.entities import Group, GroupBookmark, GroupUser, OpenInvitation, Space, SpaceUser, User
from level.core.database.pagination import OrderDirection, Page, PageArgs, paginate
from level.core.errors import ForbiddenError, NotFoundError, ValidationError
from level.core.logging_config import get_logger
from level.core.models.domain.enums import GroupRole, InvitationState, SpaceUserRole, SpaceUserState
from level.core.models.io import SpaceCreate, SpaceUpdate, validate

from .base import BaseService
from .events import Event, space_topic, space_user_topic

logger = get_logger(__name__)

DEFAULT_GROUP_NAME = "Everyone"


def _new_invitation_token() -> str:
    return secrets.token_urlsafe(24)


class SpaceService(BaseService):
    """Service for spaces, memberships and open invitations."""

    async def require_space_user(self, user: User, space_id: str) -> SpaceUser:
        """Return the active membership of ``user`` in ``space_id``.

        Raises:
            NotFoundError: when the space does not exist or the user is not an active member
        """
        space_user = await self.repos.space_users.get_active_for_user(space_id, user.id)
        if space_user is None:
            raise NotFoundError("Space")
        return space_user

    async def create_space(self, user: User, *, name: str, slug: str) -> Tuple[Space, SpaceUser]:
        """
        Create a space owned by ``user``.

        The owner gets an open invitation to share and a default public
        "Everyone" group that every future member joins.

        Returns:
            Tuple of the space and the owner's membership
        """
        data = validate(SpaceCreate, name=name, slug=slug)
        if await self.repos.spaces.get_by_slug(data.slug) is not None:
            raise ValidationError.single("slug", "has already been taken")

        space = await self.repos.spaces.create(Space(name=data.name, slug=data.slug))
        owner = await self.repos.space_users.create(
            SpaceUser(
                space_id=space.id,
                user_id=user.id,
                role=SpaceUserRole.OWNER,
                first_name=user.first_name,
                last_name=user.last_name,
                handle=user.handle,
            )
        )
        await self.repos.open_invitations.create(OpenInvitation(space_id=space.id, token=_new_invitation_token()))

        group = await self.repos.groups.create(
            Group(space_id=space.id, creator_id=owner.id, name=DEFAULT_GROUP_NAME, is_default=True)
        )
        await self.repos.group_users.create(
            GroupUser(space_id=space.id, group_id=group.id, space_user_id=owner.id, role=GroupRole.OWNER)
        )
        await self.repos.group_bookmarks.create(
            GroupBookmark(space_id=space.id, group_id=group.id, space_user_id=owner.id)
        )

        await self.commit()
        logger.info(f"Created space {space.id} ({space.slug}) owned by user {user.id}")
        return space, owner

    async def get_space(self, user: User, *, space_id: Optional[str] = None, slug: Optional[str] = None) -> Space:
        """Look up a space by id or slug among the spaces ``user`` belongs to."""
        space: Optional[Space] = None
        if space_id is not None:
            space = await self.repos.spaces.get_by_id(space_id)
        elif slug is not None:
            space = await self.repos.spaces.get_by_slug(slug)
        if space is None:
            raise NotFoundError("Space")
        await self.require_space_user(user, space.id)
        return space

    async def list_spaces(self, user: User) -> List[Space]:
        memberships = await self.repos.space_users.list_for_user(user.id)
        spaces = [await self.repos.spaces.get_by_id(m.space_id) for m in memberships]
        return [space for space in spaces if space is not None]

    async def update_space(
        self, space_user: SpaceUser, *, name: Optional[str] = None, slug: Optional[str] = None
    ) -> Space:
        if not space_user.is_admin:
            raise ForbiddenError()
        data = validate(SpaceUpdate, name=name, slug=slug)
        space = await self.repos.spaces.get_by_id(space_user.space_id)
        if space is None:
            raise NotFoundError("Space")

        if data.slug is not None and data.slug != space.slug:
            other = await self.repos.spaces.get_by_slug(data.slug)
            if other is not None and other.id != space.id:
                raise ValidationError.single("slug", "has already been taken")
            space.slug = data.slug
        if data.name is not None:
            space.name = data.name

        await self.repos.spaces.update(space)
        self.emit(space_topic(space.id), Event("SPACE_UPDATED", {"space": space}))
        await self.commit()
        return space

    async def get_open_invitation(self, space_user: SpaceUser) -> Optional[OpenInvitation]:
        return await self.repos.open_invitations.get_active_for_space(space_user.space_id)

    async def join_space(self, user: User, token: str) -> SpaceUser:
        """
        Join the space behind an active open invitation.

        Joining twice returns the existing membership; a disabled membership
        is not reactivated.

        Raises:
            NotFoundError: when the token is unknown or revoked
        """
        invitation = await self.repos.open_invitations.get_active_by_token(token or "")
        if invitation is None:
            raise NotFoundError("Invitation")

        existing = await self.repos.space_users.get_for_user(invitation.space_id, user.id)
        if existing is not None:
            if existing.state != SpaceUserState.ACTIVE:
                raise ForbiddenError()
            return existing

        space_user = await self.repos.space_users.create(
            SpaceUser(
                space_id=invitation.space_id,
                user_id=user.id,
                role=SpaceUserRole.MEMBER,
                first_name=user.first_name,
                last_name=user.last_name,
                handle=user.handle,
            )
        )
        for group in await self.repos.groups.list_defaults(invitation.space_id):
            await self.repos.group_users.create(
                GroupUser(space_id=group.space_id, group_id=group.id, space_user_id=space_user.id)
            )
            await self.repos.group_bookmarks.create(
                GroupBookmark(space_id=group.space_id, group_id=group.id, space_user_id=space_user.id)
            )

        self.emit(space_topic(invitation.space_id), Event("SPACE_JOINED", {"space_user": space_user}))
        await self.commit()
        logger.info(f"User {user.id} joined space {invitation.space_id}")
        return space_user

    async def reset_open_invitation(self, space_user: SpaceUser) -> OpenInvitation:
        """Revoke the active invitation token of the space and issue a new one."""
        if not space_user.is_admin:
            raise ForbiddenError()

        current = await self.repos.open_invitations.get_active_for_space(space_user.space_id)
        if current is not None:
            current.state = InvitationState.REVOKED
            await self.repos.open_invitations.update(current)
        invitation = await self.repos.open_invitations.create(
            OpenInvitation(space_id=space_user.space_id, token=_new_invitation_token())
        )
        await self.commit()
        logger.info(f"Open invitation of space {space_user.space_id} reset by {space_user.id}")
        return invitation

    async def update_role(self, actor: SpaceUser, space_user_id: str, role: SpaceUserRole) -> SpaceUser:
        """
        Change the role of another member.

        Owners and admins may change roles; only an owner may grant or revoke
        the owner role, and nobody may change their own role.
        """
        if not actor.is_admin:
            raise ForbiddenError()

        target = await self.repos.space_users.get_by_id(space_user_id)
        if target is None or target.space_id != actor.space_id:
            raise NotFoundError("Space user")
        if target.id == actor.id:
            raise ValidationError.single("role", "cannot be changed for yourself")
        if SpaceUserRole.OWNER in (role, target.role) and actor.role != SpaceUserRole.OWNER:
            raise ForbiddenError()

        target.role = role
        await self.repos.space_users.update(target)
        self.emit(space_user_topic(target.id), Event("SPACE_USER_UPDATED", {"space_user": target}))
        await self.commit()
        logger.info(f"Space user {target.id} is now {role.value} (changed by {actor.id})")
        return target

    async def list_space_users(self, space_user: SpaceUser, args: PageArgs) -> Page:
        """Active members of the space ordered by last name."""
        stmt = select(SpaceUser).where(
            SpaceUser.space_id == space_user.space_id, SpaceUser.state == SpaceUserState.ACTIVE
        )
        return await paginate(
            self.session,
            stmt,
            order_column=SpaceUser.last_name,
            id_column=SpaceUser.id,
            args=args,
            direction=OrderDirection.ASC,
        )
