"""
Post entity models.

This module contains the post itself, the groups it is filed under, the
per-member inbox/subscription state and the post activity log.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Text, UniqueConstraint
from sqlmodel import Field

from level.core.models.domain.enums import (
    InboxState,
    PostLogEvent,
    PostState,
    SubscriptionState,
)

from ..base import Base, UTCDateTime, new_id, utc_now


class Post(Base, table=True):
    """A message posted to one or more groups.

    ``last_activity_at`` moves forward on every reply and drives the
    "latest activity" ordering of feeds and inboxes.

    Table: posts
    """

    __tablename__ = "posts"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    space_id: str = Field(foreign_key="spaces.id", index=True, max_length=36)
    space_user_id: str = Field(foreign_key="space_users.id", index=True, max_length=36)
    body: str = Field(sa_type=Text)
    state: PostState = Field(default=PostState.OPEN)

    inserted_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, sa_column_kwargs={"onupdate": utc_now})
    last_activity_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, index=True)

    def __repr__(self) -> str:
        return f"Post(id={self.id}, state={self.state})"


class PostGroup(Base, table=True):
    """Table: post_groups"""

    __tablename__ = "post_groups"
    __table_args__ = (UniqueConstraint("post_id", "group_id", name="uq_post_groups_post_id_group_id"),)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    space_id: str = Field(foreign_key="spaces.id", index=True, max_length=36)
    post_id: str = Field(foreign_key="posts.id", index=True, max_length=36)
    group_id: str = Field(foreign_key="groups.id", index=True, max_length=36)

    inserted_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)


class PostUser(Base, table=True):
    """Relationship between a post and one member: inbox and subscription state.

    Table: post_users
    """

    __tablename__ = "post_users"
    __table_args__ = (UniqueConstraint("post_id", "space_user_id", name="uq_post_users_post_id_space_user_id"),)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    space_id: str = Field(foreign_key="spaces.id", index=True, max_length=36)
    post_id: str = Field(foreign_key="posts.id", index=True, max_length=36)
    space_user_id: str = Field(foreign_key="space_users.id", index=True, max_length=36)
    subscription_state: SubscriptionState = Field(default=SubscriptionState.NOT_SUBSCRIBED)
    inbox_state: InboxState = Field(default=InboxState.EXCLUDED, index=True)

    inserted_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, sa_column_kwargs={"onupdate": utc_now})


class PostLog(Base, table=True):
    """Append-only activity log entry for a post.

    Table: post_logs
    """

    __tablename__ = "post_logs"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    space_id: str = Field(foreign_key="spaces.id", index=True, max_length=36)
    post_id: str = Field(foreign_key="posts.id", index=True, max_length=36)
    group_id: Optional[str] = Field(default=None, foreign_key="groups.id", max_length=36)
    reply_id: Optional[str] = Field(default=None, foreign_key="replies.id", max_length=36)
    actor_id: str = Field(foreign_key="space_users.id", max_length=36)
    event: PostLogEvent
    occurred_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, index=True)
