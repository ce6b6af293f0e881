"""
Nudge and digest entity models.

A nudge is a minute of the day (in the member's time zone) at which the
member wants a digest of their inbox. Each built digest is stored with its
sections and the posts listed in them.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Text, UniqueConstraint
from sqlmodel import Field

from ..base import Base, UTCDateTime, new_id, utc_now


class Nudge(Base, table=True):
    """Table: nudges"""

    __tablename__ = "nudges"
    __table_args__ = (UniqueConstraint("space_user_id", "minute", name="uq_nudges_space_user_id_minute"),)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    space_id: str = Field(foreign_key="spaces.id", index=True, max_length=36)
    space_user_id: str = Field(foreign_key="space_users.id", index=True, max_length=36)
    minute: int = Field(ge=0, le=1439)

    inserted_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)


class Digest(Base, table=True):
    """Table: digests"""

    __tablename__ = "digests"
    __table_args__ = (UniqueConstraint("space_user_id", "key", name="uq_digests_space_user_id_key"),)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    space_id: str = Field(foreign_key="spaces.id", index=True, max_length=36)
    space_user_id: str = Field(foreign_key="space_users.id", index=True, max_length=36)
    key: str = Field(max_length=128)
    title: str = Field(max_length=255)
    subject: str = Field(max_length=255)
    time_zone: str = Field(max_length=64)
    start_at: datetime = Field(sa_type=UTCDateTime)
    end_at: datetime = Field(sa_type=UTCDateTime)

    inserted_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)


class DigestSection(Base, table=True):
    """Table: digest_sections"""

    __tablename__ = "digest_sections"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    digest_id: str = Field(foreign_key="digests.id", index=True, max_length=36)
    title: str = Field(max_length=255)
    summary: Optional[str] = Field(default=None, sa_type=Text)
    link_text: Optional[str] = Field(default=None, max_length=255)
    link_url: Optional[str] = Field(default=None, max_length=255)
    rank: int = Field(default=0)


class DigestPost(Base, table=True):
    """Table: digest_posts"""

    __tablename__ = "digest_posts"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    digest_id: str = Field(foreign_key="digests.id", index=True, max_length=36)
    section_id: str = Field(foreign_key="digest_sections.id", index=True, max_length=36)
    post_id: str = Field(foreign_key="posts.id", max_length=36)
    rank: int = Field(default=0)
