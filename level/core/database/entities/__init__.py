"""
Database entity models.

This package contains all database entity models organized by business domain.
Importing the package registers every table on ``Base.metadata``.

Modules:
- users: User accounts
- spaces: Spaces, space memberships and open invitations
- groups: Groups, group memberships and bookmarks
- posts: Posts, post/group links, per-member inbox state and the post log
- replies: Replies and reply views
- reactions: Post and reply reactions
- mentions: ``@handle`` mentions
- notifications: Per-member notifications
- digests: Nudges, digests, digest sections and digest posts
"""

from .digests import Digest, DigestPost, DigestSection, Nudge
from .groups import Group, GroupBookmark, GroupUser
from .mentions import UserMention
from .notifications import Notification
from .posts import Post, PostGroup, PostLog, PostUser
from .reactions import PostReaction, ReplyReaction
from .replies import Reply, ReplyView
from .spaces import OpenInvitation, Space, SpaceUser
from .users import User

__all__ = [
    "Digest",
    "DigestPost",
    "DigestSection",
    "Group",
    "GroupBookmark",
    "GroupUser",
    "Notification",
    "Nudge",
    "OpenInvitation",
    "Post",
    "PostGroup",
    "PostLog",
    "PostReaction",
    "PostUser",
    "Reply",
    "ReplyReaction",
    "ReplyView",
    "Space",
    "SpaceUser",
    "User",
    "UserMention",
]
