"""
Reply entity models.

Replies belong to a post. Deleting a reply only flags it so that the post
log and view history stay consistent.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Text
from sqlmodel import Field

from ..base import Base, UTCDateTime, new_id, utc_now


class Reply(Base, table=True):
    """Table: replies"""

    __tablename__ = "replies"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    space_id: str = Field(foreign_key="spaces.id", index=True, max_length=36)
    post_id: str = Field(foreign_key="posts.id", index=True, max_length=36)
    space_user_id: str = Field(foreign_key="space_users.id", index=True, max_length=36)
    body: str = Field(sa_type=Text)
    is_deleted: bool = Field(default=False)

    inserted_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"Reply(id={self.id}, post_id={self.post_id})"


class ReplyView(Base, table=True):
    """Records that a member has seen a reply.

    Table: reply_views
    """

    __tablename__ = "reply_views"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    space_id: str = Field(foreign_key="spaces.id", index=True, max_length=36)
    post_id: str = Field(foreign_key="posts.id", index=True, max_length=36)
    reply_id: str = Field(foreign_key="replies.id", index=True, max_length=36)
    space_user_id: str = Field(foreign_key="space_users.id", index=True, max_length=36)
    occurred_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
