"""
Shared SQLModel base class plus id and timestamp defaults for entity columns.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import ConfigDict
from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator
from sqlmodel import SQLModel


class Base(SQLModel):
    """Parent of every table; its metadata is what alembic and create_all use."""

    model_config = ConfigDict(arbitrary_types_allowed=True)


class UTCDateTime(TypeDecorator):
    """Naive UTC timestamp column.

    Aware values are converted to UTC and stripped before binding, so
    comparisons against stored values behave the same on SQLite and Postgres.
    Every entity timestamp declares this type explicitly instead of relying on
    the default mapping for ``datetime`` annotations.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect: Any) -> Optional[datetime]:
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def process_result_value(self, value: Optional[datetime], dialect: Any) -> Optional[datetime]:
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value


def new_id() -> str:
    """Generate a primary key value."""
    return str(uuid.uuid4())


def utc_now() -> datetime:
    """Current UTC time as a naive datetime, the form ``UTCDateTime`` stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
