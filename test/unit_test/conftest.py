import itertools
from typing import AsyncGenerator, List, Optional, Tuple

import pytest
import pytest_asyncio
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlmodel.pool import StaticPool

from level.core.database import Base, create_engine, create_sessionmaker
from level.core.database import entities  # noqa: F401
from level.core.database.entities import Group, Post, Reply, Space, SpaceUser, User
from level.server.services import (
    AccountService,
    Broker,
    Event,
    GroupService,
    PostService,
    ReplyService,
    SpaceService,
    Subscription,
)

TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture
async def test_engine():
    """Create a fresh in-memory database for each test."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_maker(test_engine):
    return create_sessionmaker(test_engine)


@pytest_asyncio.fixture(name="session")
async def session_fixture(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Create a new session for each test."""
    async with session_maker() as session:
        yield session


@pytest.fixture
def broker() -> Broker:
    return Broker(queue_capacity=50)


async def collect(subscription: Subscription) -> List[Event]:
    """Drain the events already queued on ``subscription``."""
    subscription.close()
    return [event async for event in subscription]


@pytest.fixture
def drain():
    return collect


class Factory:
    """Builds accounts, spaces, groups and posts through the services."""

    def __init__(self, session: AsyncSession, broker: Broker) -> None:
        self.session = session
        self.broker = broker
        self._seq = itertools.count(1)

    def service(self, service_cls):
        return service_cls(self.session, self.broker)

    async def user(self, handle: Optional[str] = None, **overrides) -> User:
        n = next(self._seq)
        handle = handle or f"user{n}"
        fields = dict(
            email=f"{handle}@example.com",
            password="secret-password",
            first_name="Test",
            last_name=f"User{n:03d}",
            handle=handle,
        )
        fields.update(overrides)
        return await self.service(AccountService).register(**fields)

    async def space(self, owner: Optional[User] = None, **overrides) -> Tuple[Space, SpaceUser]:
        owner = owner or await self.user()
        n = next(self._seq)
        fields = dict(name=f"Space {n}", slug=f"space-{n}")
        fields.update(overrides)
        return await self.service(SpaceService).create_space(owner, **fields)

    async def member(self, space: Space, user: Optional[User] = None, **user_fields) -> SpaceUser:
        user = user or await self.user(**user_fields)
        return await self.service(SpaceService).join_space(user, await self.invitation_token(space))

    async def invitation_token(self, space: Space) -> str:
        invitation = await self.service(SpaceService).repos.open_invitations.get_active_for_space(space.id)
        return invitation.token

    async def account(self, space_user: SpaceUser) -> User:
        return await self.service(AccountService).repos.users.get_by_id(space_user.user_id)

    async def default_group(self, space: Space) -> Group:
        groups = await self.service(SpaceService).repos.groups.list_defaults(space.id)
        return groups[0]

    async def group(self, space_user: SpaceUser, **overrides) -> Group:
        fields = dict(name=f"Group {next(self._seq)}")
        fields.update(overrides)
        return await self.service(GroupService).create_group(space_user, **fields)

    async def post(self, space_user: SpaceUser, group: Group, body: str = "Hello world") -> Post:
        return await self.service(PostService).create_post(space_user, group, body)

    async def reply(self, space_user: SpaceUser, post: Post, body: str = "A reply") -> Reply:
        return await self.service(ReplyService).create_reply(space_user, post, body)


@pytest.fixture
def factory(session: AsyncSession, broker: Broker) -> Factory:
    return Factory(session, broker)
