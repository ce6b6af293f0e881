from typing import Any, AsyncGenerator, Dict, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlmodel.ext.asyncio.session import AsyncSession

from level.core.database.entities import User
from level.server.services import AccountService, Broker


@pytest_asyncio.fixture(name="client")
async def client_fixture(session: AsyncSession, broker: Broker) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client with overridden session and broker dependencies."""
    from level.core.database.session import get_session
    from level.server.main import app
    from level.server.services import get_broker

    async def get_session_override() -> AsyncGenerator[AsyncSession, None]:
        yield session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_broker] = lambda: broker

    # ASGITransport does not run the lifespan, so init_db never touches the real engine
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
        yield client

    app.dependency_overrides.clear()


def auth_headers(user: User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {AccountService.issue_token(user)}"}


@pytest.fixture
def graphql(client: AsyncClient):
    """Post a GraphQL operation, optionally as ``user``, and return the decoded body."""

    async def execute(query: str, variables: Optional[Dict[str, Any]] = None, user: Optional[User] = None):
        response = await client.post(
            "/graphql",
            json={"query": query, "variables": variables or {}},
            headers=auth_headers(user) if user is not None else {},
        )
        assert response.status_code == 200, response.text
        return response.json()

    return execute
