"""
Cursor based pagination over SQLModel select statements.

Connections follow the Relay shape used by the GraphQL API: ``first``/``after``
page forward, ``last``/``before`` page backward. A cursor is the URL-safe
base64 encoding of the ordering value and the row id of an edge; the id breaks
ties so pages stay stable when many rows share a timestamp.
"""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Generic, List, Optional, Tuple, TypeVar

from sqlalchemy import and_, func, or_
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from level.core.errors import FieldError, ValidationError
from level.server.core.config import settings

NodeType = TypeVar("NodeType")


class OrderDirection(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


@dataclass(frozen=True)
class PageArgs:
    """Connection arguments as received from the API."""

    first: Optional[int] = None
    after: Optional[str] = None
    last: Optional[int] = None
    before: Optional[str] = None


@dataclass
class PageInfo:
    has_next_page: bool = False
    has_previous_page: bool = False
    start_cursor: Optional[str] = None
    end_cursor: Optional[str] = None


@dataclass
class Edge(Generic[NodeType]):
    node: NodeType
    cursor: str


@dataclass
class Page(Generic[NodeType]):
    """One page of a connection."""

    edges: List[Edge[NodeType]] = field(default_factory=list)
    page_info: PageInfo = field(default_factory=PageInfo)
    total_count: int = 0

    @property
    def nodes(self) -> List[NodeType]:
        return [edge.node for edge in self.edges]


def encode_cursor(value: Any, row_id: str) -> str:
    if isinstance(value, datetime):
        payload = ["dt", value.isoformat(), row_id]
    else:
        payload = ["s", value, row_id]
    raw = json.dumps(payload, separators=(",", ":")).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii")


def decode_cursor(cursor: str) -> Tuple[Any, str]:
    """Decode a cursor into ``(ordering value, row id)``.

    Raises:
        ValidationError: when the cursor was not produced by ``encode_cursor``
    """
    try:
        kind, value, row_id = json.loads(base64.urlsafe_b64decode(cursor.encode("ascii")))
        if not isinstance(row_id, str):
            raise TypeError(row_id)
        if kind == "dt":
            value = datetime.fromisoformat(value)
        elif kind != "s" or isinstance(value, bool) or not isinstance(value, (str, int, float)):
            raise ValueError(kind)
        return value, row_id
    except (ValueError, TypeError, binascii.Error, UnicodeError):
        raise ValidationError.single("cursor", "is invalid") from None


def _validate(args: PageArgs) -> Tuple[Optional[int], Optional[int]]:
    errors = []
    if args.first is not None and args.last is not None:
        errors.append(FieldError("first", "cannot be combined with last"))
    if args.first is not None and args.first < 0:
        errors.append(FieldError("first", "must be greater than or equal to 0"))
    if args.last is not None and args.last < 0:
        errors.append(FieldError("last", "must be greater than or equal to 0"))
    if errors:
        raise ValidationError(errors)

    max_size = settings.pagination.max_page_size
    first = min(args.first, max_size) if args.first is not None else None
    last = min(args.last, max_size) if args.last is not None else None
    if first is None and last is None:
        first = settings.pagination.default_page_size
    return first, last


def _after(order_column, id_column, direction: OrderDirection, value: Any, row_id: str):
    if direction == OrderDirection.ASC:
        return or_(order_column > value, and_(order_column == value, id_column > row_id))
    return or_(order_column < value, and_(order_column == value, id_column < row_id))


def _before(order_column, id_column, direction: OrderDirection, value: Any, row_id: str):
    if direction == OrderDirection.ASC:
        return or_(order_column < value, and_(order_column == value, id_column < row_id))
    return or_(order_column > value, and_(order_column == value, id_column > row_id))


def _ordered(stmt, order_column, id_column, direction: OrderDirection):
    if direction == OrderDirection.ASC:
        return stmt.order_by(order_column.asc(), id_column.asc())
    return stmt.order_by(order_column.desc(), id_column.desc())


async def paginate(
    session: AsyncSession,
    stmt,
    *,
    order_column,
    id_column,
    args: PageArgs,
    direction: OrderDirection = OrderDirection.DESC,
) -> Page:
    """Run ``stmt`` as one page of a connection.

    Args:
        session: Async SQLModel session
        stmt: A ``select(Entity)`` statement with every filter already applied
            and no ordering
        order_column: Column the connection is ordered by (e.g. ``Post.inserted_at``)
        id_column: Primary key column of the same entity, used as tie-breaker
        args: Connection arguments
        direction: Ordering direction of the forward page

    Returns:
        A ``Page`` whose edges carry entity instances
    """
    first, last = _validate(args)

    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    total_count = (await session.exec(count_stmt)).one()

    if args.after:
        value, row_id = decode_cursor(args.after)
        stmt = stmt.where(_after(order_column, id_column, direction, value, row_id))
    if args.before:
        value, row_id = decode_cursor(args.before)
        stmt = stmt.where(_before(order_column, id_column, direction, value, row_id))

    if last is not None:
        reverse = OrderDirection.ASC if direction == OrderDirection.DESC else OrderDirection.DESC
        rows = list((await session.exec(_ordered(stmt, order_column, id_column, reverse).limit(last + 1))).all())
        has_previous_page = len(rows) > last
        rows = list(reversed(rows[:last]))
        has_next_page = args.before is not None
    else:
        rows = list((await session.exec(_ordered(stmt, order_column, id_column, direction).limit(first + 1))).all())
        has_next_page = len(rows) > first
        rows = rows[:first]
        has_previous_page = args.after is not None

    edges = [
        Edge(node=row, cursor=encode_cursor(getattr(row, order_column.key), getattr(row, id_column.key)))
        for row in rows
    ]
    page_info = PageInfo(
        has_next_page=has_next_page,
        has_previous_page=has_previous_page,
        start_cursor=edges[0].cursor if edges else None,
        end_cursor=edges[-1].cursor if edges else None,
    )
    return Page(edges=edges, page_info=page_info, total_count=total_count)
