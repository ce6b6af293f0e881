"""
Nudges and digests.

A nudge asks for a digest at a given minute of the day in the member's time
zone. ``send_nudge_digests`` is meant to be called once a minute by an
external scheduler (see ``level.server.jobs``); digests are built and stored,
delivery is left to the client.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy import func
from sqlmodel import select

from level.core.database.base import utc_now
from level.core.database.entities import (
    Digest,
    DigestPost,
    DigestSection,
    GroupUser,
    Nudge,
    Post,
    PostGroup,
    PostUser,
    SpaceUser,
)
from level.core.database.repositories import visible_post_ids
from level.core.errors import NotFoundError, ValidationError
from level.core.logging_config import get_logger
from level.core.models.domain.enums import InboxState, SpaceUserState
from level.core.models.io import NudgeInput, validate

from .base import BaseService

logger = get_logger(__name__)

SECTION_POST_LIMIT = 5


def _zone(name: Optional[str]) -> ZoneInfo:
    try:
        return ZoneInfo(name or "UTC")
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo("UTC")


def local_time(now: datetime, time_zone: Optional[str]) -> datetime:
    """Convert a naive UTC timestamp to the wall clock time of ``time_zone``."""
    return now.replace(tzinfo=timezone.utc).astimezone(_zone(time_zone))


class DigestService(BaseService):
    """Service for nudges and digests."""

    async def create_nudge(self, space_user: SpaceUser, minute: int) -> Nudge:
        data = validate(NudgeInput, minute=minute)
        if await self.repos.nudges.get_for_minute(space_user.id, data.minute) is not None:
            raise ValidationError.single("minute", "has already been taken")
        nudge = await self.repos.nudges.create(
            Nudge(space_id=space_user.space_id, space_user_id=space_user.id, minute=data.minute)
        )
        await self.commit()
        return nudge

    async def delete_nudge(self, space_user: SpaceUser, nudge_id: str) -> Nudge:
        nudge = await self.repos.nudges.get_by_id(nudge_id)
        if nudge is None or nudge.space_user_id != space_user.id:
            raise NotFoundError("Nudge")
        await self.repos.nudges.delete(nudge.id)
        await self.commit()
        return nudge

    async def list_nudges(self, space_user: SpaceUser) -> List[Nudge]:
        return await self.repos.nudges.list_for_space_user(space_user.id)

    async def get_digest(self, space_user: SpaceUser, digest_id: str) -> Digest:
        digest = await self.repos.digests.get_by_id(digest_id)
        if digest is None or digest.space_user_id != space_user.id:
            raise NotFoundError("Digest")
        return digest

    async def list_sections(self, digest: Digest) -> List[DigestSection]:
        return await self.repos.digest_sections.list_for_digest(digest.id)

    async def list_section_posts(self, section: DigestSection) -> List[Post]:
        links = await self.repos.digest_posts.list_for_section(section.id)
        posts = [await self.repos.posts.get_by_id(link.post_id) for link in links]
        return [post for post in posts if post is not None]

    async def _unread_posts(self, space_user: SpaceUser) -> Tuple[List[Post], int]:
        unread = select(PostUser.post_id).where(
            PostUser.space_user_id == space_user.id, PostUser.inbox_state == InboxState.UNREAD
        )
        stmt = select(Post).where(Post.id.in_(unread), Post.id.in_(visible_post_ids(space_user)))
        total = (await self.session.exec(select(func.count()).select_from(stmt.subquery()))).one()
        rows = await self.session.exec(stmt.order_by(Post.last_activity_at.desc()).limit(SECTION_POST_LIMIT))
        return list(rows.all()), total

    async def _recent_posts(self, space_user: SpaceUser, start_at: datetime, end_at: datetime) -> List[Post]:
        my_groups = select(GroupUser.group_id).where(GroupUser.space_user_id == space_user.id)
        in_my_groups = select(PostGroup.post_id).where(PostGroup.group_id.in_(my_groups))
        stmt = (
            select(Post)
            .where(
                Post.id.in_(in_my_groups),
                Post.id.in_(visible_post_ids(space_user)),
                Post.last_activity_at >= start_at,
                Post.last_activity_at < end_at,
            )
            .order_by(Post.last_activity_at.desc())
            .limit(SECTION_POST_LIMIT)
        )
        return list((await self.session.exec(stmt)).all())

    async def build_digest(
        self,
        space_user: SpaceUser,
        *,
        key: str,
        title: str,
        start_at: datetime,
        end_at: datetime,
        now: Optional[datetime] = None,
    ) -> Digest:
        """
        Build and store a digest for ``space_user``.

        Building again with the same ``key`` returns the stored digest. ``now``
        is recorded as the build time and defaults to the current time.

        Sections:
        - "Inbox": unread inbox posts, latest activity first
        - "Recent activity": posts of the member's groups active inside the window
        """
        existing = await self.repos.digests.get_by_key(space_user.id, key)
        if existing is not None:
            return existing

        space = await self.repos.spaces.get_by_id(space_user.space_id)
        user = await self.repos.users.get_by_id(space_user.user_id)
        space_name = space.name if space is not None else ""
        slug = space.slug if space is not None else ""

        digest = await self.repos.digests.create(
            Digest(
                space_id=space_user.space_id,
                space_user_id=space_user.id,
                key=key,
                title=title,
                subject=f"[{space_name}] {title}",
                time_zone=user.time_zone if user is not None else "UTC",
                start_at=start_at,
                end_at=end_at,
                inserted_at=now or utc_now(),
            )
        )

        unread, unread_count = await self._unread_posts(space_user)
        if unread_count:
            inbox_summary = f"You have {unread_count} unread post{'s' if unread_count != 1 else ''} in your inbox."
        else:
            inbox_summary = "Congratulations! You've achieved Inbox Zero."
        await self._add_section(
            digest, 0, "Inbox", inbox_summary, "View my inbox", f"/{slug}/inbox", unread
        )

        recent = await self._recent_posts(space_user, start_at, end_at)
        recent_summary = (
            "Here are the latest posts from your groups." if recent else "There has been no activity in your groups."
        )
        await self._add_section(
            digest, 1, "Recent activity", recent_summary, "View all activity", f"/{slug}/posts", recent
        )

        await self.commit()
        logger.info(f"Built digest {digest.id} ({key}) for space user {space_user.id}")
        return digest

    async def _add_section(
        self,
        digest: Digest,
        rank: int,
        title: str,
        summary: str,
        link_text: str,
        link_url: str,
        posts: List[Post],
    ) -> DigestSection:
        section = await self.repos.digest_sections.create(
            DigestSection(
                digest_id=digest.id, title=title, summary=summary, link_text=link_text, link_url=link_url, rank=rank
            )
        )
        for post_rank, post in enumerate(posts):
            await self.repos.digest_posts.create(
                DigestPost(digest_id=digest.id, section_id=section.id, post_id=post.id, rank=post_rank)
            )
        return section

    async def due_nudges(self, now: Optional[datetime] = None) -> List[Tuple[Nudge, SpaceUser]]:
        """Nudges whose minute is the current minute of day in their member's time zone."""
        now = now or utc_now()
        due: List[Tuple[Nudge, SpaceUser]] = []
        for nudge in await self.repos.nudges.list():
            space_user = await self.repos.space_users.get_by_id(nudge.space_user_id)
            if space_user is None or space_user.state != SpaceUserState.ACTIVE:
                continue
            user = await self.repos.users.get_by_id(space_user.user_id)
            local = local_time(now, user.time_zone if user is not None else None)
            if local.hour * 60 + local.minute == nudge.minute:
                due.append((nudge, space_user))
        return due

    async def send_nudge_digests(self, now: Optional[datetime] = None) -> List[Digest]:
        """Build one digest per due nudge, keyed so a minute is never processed twice."""
        now = now or utc_now()
        digests: List[Digest] = []
        for nudge, space_user in await self.due_nudges(now):
            user = await self.repos.users.get_by_id(space_user.user_id)
            local_date = local_time(now, user.time_zone if user is not None else None).date()
            digest = await self.build_digest(
                space_user,
                key=f"nudge:{nudge.id}:{local_date.isoformat()}",
                title="Recent activity",
                start_at=now - timedelta(days=1),
                end_at=now,
                now=now,
            )
            digests.append(digest)
        logger.info(f"Processed {len(digests)} nudge digest(s)")
        return digests
