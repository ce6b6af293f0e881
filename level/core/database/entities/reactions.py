"""
Reaction entity models.

A reaction is a short value (usually one emoji) attached by a member to a
post or a reply. A member reacts at most once per value.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from ..base import Base, UTCDateTime, new_id, utc_now


class PostReaction(Base, table=True):
    """Table: post_reactions"""

    __tablename__ = "post_reactions"
    __table_args__ = (
        UniqueConstraint("post_id", "space_user_id", "value", name="uq_post_reactions_post_id_space_user_id_value"),
    )

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    space_id: str = Field(foreign_key="spaces.id", index=True, max_length=36)
    post_id: str = Field(foreign_key="posts.id", index=True, max_length=36)
    space_user_id: str = Field(foreign_key="space_users.id", index=True, max_length=36)
    value: str = Field(max_length=16)

    inserted_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)


class ReplyReaction(Base, table=True):
    """Table: reply_reactions"""

    __tablename__ = "reply_reactions"
    __table_args__ = (
        UniqueConstraint(
            "reply_id", "space_user_id", "value", name="uq_reply_reactions_reply_id_space_user_id_value"
        ),
    )

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    space_id: str = Field(foreign_key="spaces.id", index=True, max_length=36)
    post_id: str = Field(foreign_key="posts.id", index=True, max_length=36)
    reply_id: str = Field(foreign_key="replies.id", index=True, max_length=36)
    space_user_id: str = Field(foreign_key="space_users.id", index=True, max_length=36)
    value: str = Field(max_length=16)

    inserted_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
