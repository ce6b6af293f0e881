"""
User entity models.

A user is a person with login credentials. The same user may belong to
several spaces; per-space identity lives on ``SpaceUser``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from level.core.models.domain.enums import UserState

from ..base import Base, UTCDateTime, new_id, utc_now


class User(Base, table=True):
    """Account with email/password credentials.

    Table: users
    """

    __tablename__ = "users"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    email: str = Field(max_length=254, unique=True, index=True)
    hashed_password: str = Field(max_length=128)
    first_name: str = Field(max_length=255)
    last_name: str = Field(max_length=255)
    handle: str = Field(max_length=20, unique=True, index=True)
    time_zone: str = Field(default="UTC", max_length=64)
    state: UserState = Field(default=UserState.ACTIVE)

    inserted_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, sa_column_kwargs={"onupdate": utc_now})
    last_seen_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"User(id={self.id}, handle={self.handle})"
