"""
Notification entity models.

Notifications are per member records of activity that concerns them. The
``topic`` groups notifications about the same object (``post:<id>``,
``reply:<id>``) so they can be dismissed together.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict

from sqlalchemy import JSON, Column
from sqlmodel import Field

from level.core.models.domain.enums import NotificationEvent, NotificationState

from ..base import Base, UTCDateTime, new_id, utc_now


class Notification(Base, table=True):
    """Table: notifications"""

    __tablename__ = "notifications"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    space_id: str = Field(foreign_key="spaces.id", index=True, max_length=36)
    space_user_id: str = Field(foreign_key="space_users.id", index=True, max_length=36)
    topic: str = Field(max_length=64, index=True)
    event: NotificationEvent
    data: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    state: NotificationState = Field(default=NotificationState.UNDISMISSED, index=True)

    inserted_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, sa_column_kwargs={"onupdate": utc_now})
