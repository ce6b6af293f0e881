"""
Generic async repository.

Repositories stage and flush changes only. The service owning the session
decides when the unit of work is committed or rolled back.
"""

from __future__ import annotations

from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession

EntityType = TypeVar("EntityType", bound=SQLModel)


class AsyncQueryBuilder:
    """Helpers for building SQLModel select statements."""

    @staticmethod
    def apply_filters(stmt, model: Type[EntityType], filters: Dict[str, Any]):
        """Add an equality condition for every filter naming a column of ``model``.

        ``None`` values are skipped, so optional arguments can be passed through as is.
        """
        for key, value in filters.items():
            if value is not None and hasattr(model, key):
                stmt = stmt.where(getattr(model, key) == value)
        return stmt

    @staticmethod
    def apply_pagination(stmt, limit: Optional[int], offset: Optional[int]):
        if limit is not None:
            stmt = stmt.limit(limit)
        if offset is not None:
            stmt = stmt.offset(offset)
        return stmt


class AsyncBaseRepository(Generic[EntityType]):
    """Create, fetch, list, update and delete for one SQLModel table."""

    def __init__(self, session: AsyncSession, model: Type[EntityType]) -> None:
        self.session = session
        self.model = model

    async def _stage(self, entity: EntityType) -> EntityType:
        self.session.add(entity)
        # Flush so defaults, ids and constraint violations surface now
        await self.session.flush()
        return entity

    async def create(self, entity: EntityType) -> EntityType:
        return await self._stage(entity)

    async def update(self, entity: EntityType) -> EntityType:
        return await self._stage(entity)

    async def get_by_id(self, entity_id: str) -> Optional[EntityType]:
        """Primary key lookup; ``None`` when the row does not exist."""
        return await self.session.get(self.model, entity_id)

    async def list(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        filters: Optional[Dict[str, Any]] = None,
        *,
        order_by: Any = None,
    ) -> List[EntityType]:
        """List rows matching ``filters``.

        Args:
            limit: Maximum number of rows to return
            offset: Number of rows to skip
            filters: Column name to value equality filters
            order_by: Ordering clause, e.g. ``Nudge.minute.asc()``

        Returns:
            List of entity instances
        """
        stmt = AsyncQueryBuilder.apply_filters(select(self.model), self.model, filters or {})
        if order_by is not None:
            stmt = stmt.order_by(order_by)
        stmt = AsyncQueryBuilder.apply_pagination(stmt, limit, offset)
        result = await self.session.exec(stmt)
        return list(result.all())

    async def delete(self, entity_id: str) -> bool:
        """
        Delete the row with ``entity_id``.

        Returns:
            False when there was nothing to delete
        """
        entity = await self.get_by_id(entity_id)
        if entity is None:
            return False
        await self.session.delete(entity)
        await self.session.flush()
        return True
