"""
Post repositories.

Covers posts, their group links, the per-member ``PostUser`` rows that hold
inbox and subscription state, and the post activity log.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from level.core.models.domain.enums import SubscriptionState

from ..entities.posts import Post, PostGroup, PostLog, PostUser
from ..entities.spaces import SpaceUser
from .base import AsyncBaseRepository
from .groups import visible_group_ids


def visible_post_ids(space_user: SpaceUser):
    """Select the ids of posts filed under at least one group visible to ``space_user``."""
    return select(PostGroup.post_id).where(PostGroup.group_id.in_(visible_group_ids(space_user)))


class PostRepository(AsyncBaseRepository[Post]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Post)

    async def get_visible(self, space_user: SpaceUser, post_id: str) -> Optional[Post]:
        stmt = select(Post).where(
            Post.id == post_id,
            Post.space_id == space_user.space_id,
            Post.id.in_(visible_post_ids(space_user)),
        )
        result = await self.session.exec(stmt)
        return result.first()

    async def list_visible_by_ids(self, space_user: SpaceUser, post_ids: Sequence[str]) -> List[Post]:
        if not post_ids:
            return []
        stmt = select(Post).where(
            Post.id.in_(list(post_ids)),
            Post.space_id == space_user.space_id,
            Post.id.in_(visible_post_ids(space_user)),
        )
        result = await self.session.exec(stmt)
        return list(result.all())


class PostGroupRepository(AsyncBaseRepository[PostGroup]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, PostGroup)


class PostUserRepository(AsyncBaseRepository[PostUser]):
    """Repository for inbox and subscription state."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, PostUser)

    async def get_for(self, post_id: str, space_user_id: str) -> Optional[PostUser]:
        stmt = select(PostUser).where(PostUser.post_id == post_id, PostUser.space_user_id == space_user_id)
        result = await self.session.exec(stmt)
        return result.first()

    async def get_or_build(self, post: Post, space_user_id: str) -> PostUser:
        """Return the existing row or a new, not yet staged, default row."""
        existing = await self.get_for(post.id, space_user_id)
        if existing is not None:
            return existing
        return PostUser(space_id=post.space_id, post_id=post.id, space_user_id=space_user_id)

    async def list_subscribers(self, post_id: str) -> List[PostUser]:
        stmt = select(PostUser).where(
            PostUser.post_id == post_id, PostUser.subscription_state == SubscriptionState.SUBSCRIBED
        )
        result = await self.session.exec(stmt)
        return list(result.all())


class PostLogRepository(AsyncBaseRepository[PostLog]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, PostLog)

    async def list_for_post(self, post_id: str) -> List[PostLog]:
        stmt = select(PostLog).where(PostLog.post_id == post_id).order_by(PostLog.occurred_at.asc())
        result = await self.session.exec(stmt)
        return list(result.all())
