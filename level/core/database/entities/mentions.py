"""
Mention entity models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, UTCDateTime, new_id, utc_now


class UserMention(Base, table=True):
    """An ``@handle`` reference to a member inside a post or reply body.

    Table: user_mentions
    """

    __tablename__ = "user_mentions"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    space_id: str = Field(foreign_key="spaces.id", index=True, max_length=36)
    post_id: str = Field(foreign_key="posts.id", index=True, max_length=36)
    reply_id: Optional[str] = Field(default=None, foreign_key="replies.id", max_length=36)
    mentioner_id: str = Field(foreign_key="space_users.id", max_length=36)
    mentioned_id: str = Field(foreign_key="space_users.id", index=True, max_length=36)
    occurred_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
    dismissed_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
