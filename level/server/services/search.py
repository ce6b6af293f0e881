"""
Post search.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import func, or_
from sqlmodel import select

from level.core.database.entities import Post, Reply, SpaceUser
from level.core.database.pagination import OrderDirection, Page, PageArgs, paginate
from level.core.database.repositories import visible_post_ids
from level.core.logging_config import get_logger
from level.core.models.io import SearchInput, validate

from .base import BaseService

logger = get_logger(__name__)


class SearchService(BaseService):
    async def search_posts(
        self, space_user: SpaceUser, query: str, *, first: Optional[int] = None, after: Optional[str] = None
    ) -> Page:
        """
        Visible posts whose body or any live reply contains ``query``, ignoring case.

        Raises:
            ValidationError: when the query is blank
        """
        data = validate(SearchInput, query=query)
        needle = data.query.lower()

        matching_replies = select(Reply.post_id).where(
            Reply.space_id == space_user.space_id,
            Reply.is_deleted == False,  # noqa: E712
            func.lower(Reply.body).contains(needle, autoescape=True),
        )
        stmt = select(Post).where(
            Post.space_id == space_user.space_id,
            Post.id.in_(visible_post_ids(space_user)),
            or_(func.lower(Post.body).contains(needle, autoescape=True), Post.id.in_(matching_replies)),
        )
        logger.debug(f"Searching posts of space {space_user.space_id} for {data.query!r}")
        return await paginate(
            self.session,
            stmt,
            order_column=Post.inserted_at,
            id_column=Post.id,
            args=PageArgs(first=first, after=after),
            direction=OrderDirection.DESC,
        )
