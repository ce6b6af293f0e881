"""
Shared plumbing for domain services.

A service works on one session. Writes are staged through the repositories,
``commit()`` ends the unit of work and only then publishes the events that
were queued with ``emit()``, so subscribers never see uncommitted state.
Services composed with ``using()`` share the session and the event outbox of
the service that created them.
"""

from __future__ import annotations

from typing import List, Optional, Tuple, Type, TypeVar

from sqlmodel.ext.asyncio.session import AsyncSession

from level.core.database.repositories import RepoBundle, build_repos

from .events import Broker, Event, broker as default_broker

ServiceType = TypeVar("ServiceType", bound="BaseService")


class BaseService:
    def __init__(
        self,
        session: AsyncSession,
        broker: Optional[Broker] = None,
        *,
        outbox: Optional[List[Tuple[str, Event]]] = None,
    ) -> None:
        """Initialize the service with a database session and an event broker."""
        self.session = session
        self.repos: RepoBundle = build_repos(session)
        self.broker = broker or default_broker
        self._outbox: List[Tuple[str, Event]] = outbox if outbox is not None else []

    def using(self, service_cls: Type[ServiceType]) -> ServiceType:
        """Build another service bound to the same unit of work."""
        return service_cls(self.session, self.broker, outbox=self._outbox)

    def emit(self, topic: str, event: Event) -> None:
        """Queue an event to be published after the next commit."""
        self._outbox.append((topic, event))

    async def commit(self) -> None:
        """Commit the unit of work and publish queued events."""
        try:
            await self.session.commit()
        except Exception:
            self._outbox.clear()
            await self.session.rollback()
            raise
        pending = list(self._outbox)
        self._outbox.clear()
        for topic, event in pending:
            self.broker.publish(topic, event)
