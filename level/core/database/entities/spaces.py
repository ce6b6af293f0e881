"""
Space entity models.

A space is one team's workspace. Members join it as ``SpaceUser`` rows, either
as its creator or through the space's open invitation link.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from level.core.models.domain.enums import (
    InvitationState,
    SpaceState,
    SpaceUserRole,
    SpaceUserState,
)

from ..base import Base, UTCDateTime, new_id, utc_now


class Space(Base, table=True):
    """Team workspace addressed by a unique slug.

    Table: spaces
    """

    __tablename__ = "spaces"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    name: str = Field(max_length=255)
    slug: str = Field(max_length=50, unique=True, index=True)
    state: SpaceState = Field(default=SpaceState.ACTIVE)

    inserted_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"Space(id={self.id}, slug={self.slug})"


class SpaceUser(Base, table=True):
    """Membership of a user in a space.

    Names and handle are copied from the user so that space-scoped queries
    (mentions, member listings) stay inside one table.

    Table: space_users
    """

    __tablename__ = "space_users"
    __table_args__ = (UniqueConstraint("space_id", "user_id", name="uq_space_users_space_id_user_id"),)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    space_id: str = Field(foreign_key="spaces.id", index=True, max_length=36)
    user_id: str = Field(foreign_key="users.id", index=True, max_length=36)
    role: SpaceUserRole = Field(default=SpaceUserRole.MEMBER)
    state: SpaceUserState = Field(default=SpaceUserState.ACTIVE)
    first_name: str = Field(max_length=255)
    last_name: str = Field(max_length=255)
    handle: str = Field(max_length=20, index=True)

    inserted_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, sa_column_kwargs={"onupdate": utc_now})

    @property
    def is_admin(self) -> bool:
        return self.role in (SpaceUserRole.OWNER, SpaceUserRole.ADMIN)

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"SpaceUser(id={self.id}, space_id={self.space_id}, role={self.role})"


class OpenInvitation(Base, table=True):
    """Shareable token that lets anyone with the link join a space.

    Table: open_invitations
    """

    __tablename__ = "open_invitations"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    space_id: str = Field(foreign_key="spaces.id", index=True, max_length=36)
    token: str = Field(max_length=64, unique=True, index=True)
    state: InvitationState = Field(default=InvitationState.ACTIVE)

    inserted_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, sa_column_kwargs={"onupdate": utc_now})
