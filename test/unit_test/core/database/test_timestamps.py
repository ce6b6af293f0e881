from datetime import datetime, timedelta, timezone

from sqlalchemy import DateTime
from sqlmodel import select

from level.core.database import Base
from level.core.database.base import UTCDateTime, utc_now
from level.core.database.entities import Digest, Post


def test_every_timestamp_column_uses_utc_type():
    timestamp_columns = [
        column
        for table in Base.metadata.sorted_tables
        for column in table.columns
        if isinstance(column.type, (DateTime, UTCDateTime)) or column.name.endswith("_at")
    ]
    assert {"inserted_at", "last_activity_at", "dismissed_at"} <= {column.name for column in timestamp_columns}
    for column in timestamp_columns:
        assert isinstance(column.type, UTCDateTime), str(column)


def test_utc_now_is_naive():
    assert utc_now().tzinfo is None


async def test_insert_and_read_back_naive_utc(factory, session):
    space, owner = await factory.space()
    group = await factory.default_group(space)
    post = await factory.post(owner, group)
    await session.commit()

    stored = (await session.exec(select(Post.inserted_at).where(Post.id == post.id))).one()
    assert stored.tzinfo is None
    assert abs(utc_now() - stored) < timedelta(minutes=1)


async def test_aware_values_are_stored_as_utc(factory, session):
    space, owner = await factory.space()
    start = datetime(2026, 5, 1, 10, 0, tzinfo=timezone(timedelta(hours=2)))
    digest = Digest(
        space_id=space.id,
        space_user_id=owner.id,
        key="manual",
        title="Manual",
        subject="Manual",
        time_zone="Etc/UTC",
        start_at=start,
        end_at=start + timedelta(hours=1),
    )
    session.add(digest)
    await session.commit()

    stored = (await session.exec(select(Digest.start_at).where(Digest.id == digest.id))).one()
    assert stored == datetime(2026, 5, 1, 8, 0)
