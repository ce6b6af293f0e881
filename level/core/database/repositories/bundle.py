"""
Repository bundle for dependency injection.

This module provides a convenience bundle of all repository instances sharing
one session, so a service works inside a single unit of work.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlmodel.ext.asyncio.session import AsyncSession

from .digests import DigestPostRepository, DigestRepository, DigestSectionRepository, NudgeRepository
from .groups import GroupBookmarkRepository, GroupRepository, GroupUserRepository
from .mentions import UserMentionRepository
from .notifications import NotificationRepository
from .posts import PostGroupRepository, PostLogRepository, PostRepository, PostUserRepository
from .reactions import PostReactionRepository, ReplyReactionRepository
from .replies import ReplyRepository, ReplyViewRepository
from .spaces import OpenInvitationRepository, SpaceRepository, SpaceUserRepository
from .users import UserRepository


@dataclass(frozen=True)
class RepoBundle:
    """Convenience bundle of all SQL repositories for dependency injection."""

    session: AsyncSession
    users: UserRepository
    spaces: SpaceRepository
    space_users: SpaceUserRepository
    open_invitations: OpenInvitationRepository
    groups: GroupRepository
    group_users: GroupUserRepository
    group_bookmarks: GroupBookmarkRepository
    posts: PostRepository
    post_groups: PostGroupRepository
    post_users: PostUserRepository
    post_logs: PostLogRepository
    replies: ReplyRepository
    reply_views: ReplyViewRepository
    post_reactions: PostReactionRepository
    reply_reactions: ReplyReactionRepository
    mentions: UserMentionRepository
    notifications: NotificationRepository
    nudges: NudgeRepository
    digests: DigestRepository
    digest_sections: DigestSectionRepository
    digest_posts: DigestPostRepository


def build_repos(session: AsyncSession) -> RepoBundle:
    """Build a RepoBundle from an existing session.

    Args:
        session: Existing async session

    Returns:
        Bundle containing all repository instances
    """
    return RepoBundle(
        session=session,
        users=UserRepository(session),
        spaces=SpaceRepository(session),
        space_users=SpaceUserRepository(session),
        open_invitations=OpenInvitationRepository(session),
        groups=GroupRepository(session),
        group_users=GroupUserRepository(session),
        group_bookmarks=GroupBookmarkRepository(session),
        posts=PostRepository(session),
        post_groups=PostGroupRepository(session),
        post_users=PostUserRepository(session),
        post_logs=PostLogRepository(session),
        replies=ReplyRepository(session),
        reply_views=ReplyViewRepository(session),
        post_reactions=PostReactionRepository(session),
        reply_reactions=ReplyReactionRepository(session),
        mentions=UserMentionRepository(session),
        notifications=NotificationRepository(session),
        nudges=NudgeRepository(session),
        digests=DigestRepository(session),
        digest_sections=DigestSectionRepository(session),
        digest_posts=DigestPostRepository(session),
    )
