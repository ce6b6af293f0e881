"""
Group entity models.

Groups are the channels posts are filed under. Private groups are only
visible to their members.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Text, UniqueConstraint
from sqlmodel import Field

from level.core.models.domain.enums import GroupRole, GroupState

from ..base import Base, UTCDateTime, new_id, utc_now


class Group(Base, table=True):
    """Channel inside a space; names are unique per space.

    Table: groups
    """

    __tablename__ = "groups"
    __table_args__ = (UniqueConstraint("space_id", "name", name="uq_groups_space_id_name"),)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    space_id: str = Field(foreign_key="spaces.id", index=True, max_length=36)
    creator_id: str = Field(foreign_key="space_users.id", max_length=36)
    name: str = Field(max_length=255)
    description: Optional[str] = Field(default=None, sa_type=Text)
    is_private: bool = Field(default=False)
    is_default: bool = Field(default=False)
    state: GroupState = Field(default=GroupState.OPEN)

    inserted_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"Group(id={self.id}, name={self.name}, state={self.state})"


class GroupUser(Base, table=True):
    """Membership of a space user in a group.

    Watchers receive every new post of the group in their inbox.

    Table: group_users
    """

    __tablename__ = "group_users"
    __table_args__ = (UniqueConstraint("group_id", "space_user_id", name="uq_group_users_group_id_space_user_id"),)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    space_id: str = Field(foreign_key="spaces.id", index=True, max_length=36)
    group_id: str = Field(foreign_key="groups.id", index=True, max_length=36)
    space_user_id: str = Field(foreign_key="space_users.id", index=True, max_length=36)
    role: GroupRole = Field(default=GroupRole.MEMBER)
    is_watching: bool = Field(default=False)

    inserted_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)


class GroupBookmark(Base, table=True):
    """Table: group_bookmarks"""

    __tablename__ = "group_bookmarks"
    __table_args__ = (
        UniqueConstraint("group_id", "space_user_id", name="uq_group_bookmarks_group_id_space_user_id"),
    )

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    space_id: str = Field(foreign_key="spaces.id", index=True, max_length=36)
    group_id: str = Field(foreign_key="groups.id", index=True, max_length=36)
    space_user_id: str = Field(foreign_key="space_users.id", index=True, max_length=36)

    inserted_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
