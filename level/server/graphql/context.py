"""
GraphQL request context.

Carries the database session and event broker of one HTTP request or
WebSocket connection, and resolves the authenticated viewer from the bearer
token on first use.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional, Type, TypeVar

from fastapi import Depends
from sqlmodel.ext.asyncio.session import AsyncSession
from strawberry.fastapi import BaseContext

from level.core.database.entities import SpaceUser, User
from level.core.database.repositories import RepoBundle, build_repos
from level.core.database.session import get_session
from level.core.errors import UnauthorizedError
from level.server.services import AccountService, BaseService, Broker, SpaceService, get_broker

ServiceType = TypeVar("ServiceType", bound=BaseService)


def _bearer(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    scheme, _, token = value.partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    return None


class LevelContext(BaseContext):
    def __init__(self, session: AsyncSession, broker: Broker) -> None:
        super().__init__()
        self.session = session
        self.broker = broker
        self.repos: RepoBundle = build_repos(session)
        # Resolvers share one session, which must not run statements concurrently
        self.lock = asyncio.Lock()
        self._services: Dict[type, BaseService] = {}
        self._viewer: Optional[User] = None
        self._space_users: Dict[str, SpaceUser] = {}

    def service(self, service_cls: Type[ServiceType]) -> ServiceType:
        if service_cls not in self._services:
            self._services[service_cls] = service_cls(self.session, self.broker)
        return self._services[service_cls]  # type: ignore[return-value]

    def _token(self) -> Optional[str]:
        params: Dict[str, Any] = getattr(self, "connection_params", None) or {}
        if params:
            token = _bearer(params.get("Authorization") or params.get("authorization")) or params.get("token")
            if token:
                return str(token)

        request = self.request
        if request is None:
            return None
        token = _bearer(request.headers.get("authorization"))
        if token:
            return token
        # Browsers cannot set headers on WebSocket upgrades
        return request.query_params.get("token")

    async def viewer(self) -> User:
        """The authenticated user.

        Raises:
            UnauthorizedError: when no valid token was sent
        """
        if self._viewer is None:
            token = self._token()
            if not token:
                raise UnauthorizedError()
            self._viewer = await self.service(AccountService).verify_token(token)
        return self._viewer

    async def space_user(self, space_id: str, *, refresh: bool = False) -> SpaceUser:
        """The viewer's active membership in ``space_id`` (``NotFoundError`` otherwise).

        Memberships are cached for the lifetime of the context; ``refresh``
        reloads it, which long lived WebSocket connections need.
        """
        if refresh:
            self._space_users.pop(space_id, None)
        if space_id not in self._space_users:
            viewer = await self.viewer()
            self._space_users[space_id] = await self.service(SpaceService).require_space_user(viewer, space_id)
        return self._space_users[space_id]


async def get_context(
    session: AsyncSession = Depends(get_session),
    broker: Broker = Depends(get_broker),
) -> LevelContext:
    return LevelContext(session=session, broker=broker)
