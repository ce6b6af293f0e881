"""Domain enums for Level models."""

from __future__ import annotations

from enum import Enum


class UserState(str, Enum):
    """Whether a user account may sign in."""

    ACTIVE = "ACTIVE"
    DISABLED = "DISABLED"


class SpaceState(str, Enum):
    ACTIVE = "ACTIVE"
    DISABLED = "DISABLED"


class SpaceUserRole(str, Enum):
    """
    Role of a member inside a space.

    Owners and admins manage the space and its groups; only owners may grant
    or revoke the owner role.
    """

    OWNER = "OWNER"
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"


class SpaceUserState(str, Enum):
    ACTIVE = "ACTIVE"
    DISABLED = "DISABLED"


class InvitationState(str, Enum):
    ACTIVE = "ACTIVE"
    REVOKED = "REVOKED"


class GroupState(str, Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"


class GroupRole(str, Enum):
    OWNER = "OWNER"
    MEMBER = "MEMBER"


class PostState(str, Enum):
    """An OPEN post is still being discussed; CLOSED means resolved."""

    OPEN = "OPEN"
    CLOSED = "CLOSED"


class InboxState(str, Enum):
    """
    Where a post sits in one member's inbox.

    EXCLUDED posts never entered the inbox (for example the author's own
    posts). Activity moves a post to UNREAD; the member then reads or
    dismisses it.
    """

    EXCLUDED = "EXCLUDED"
    UNREAD = "UNREAD"
    READ = "READ"
    DISMISSED = "DISMISSED"


class SubscriptionState(str, Enum):
    """Whether a member follows the activity of a post."""

    NOT_SUBSCRIBED = "NOT_SUBSCRIBED"
    SUBSCRIBED = "SUBSCRIBED"
    UNSUBSCRIBED = "UNSUBSCRIBED"


class PostLogEvent(str, Enum):
    """Entries of the per-post activity log."""

    POST_CREATED = "POST_CREATED"
    POST_EDITED = "POST_EDITED"
    POST_CLOSED = "POST_CLOSED"
    POST_REOPENED = "POST_REOPENED"
    REPLY_CREATED = "REPLY_CREATED"
    REPLY_EDITED = "REPLY_EDITED"
    REPLY_DELETED = "REPLY_DELETED"


class NotificationEvent(str, Enum):
    POST_CREATED = "POST_CREATED"
    POST_CLOSED = "POST_CLOSED"
    POST_REOPENED = "POST_REOPENED"
    REPLY_CREATED = "REPLY_CREATED"
    POST_REACTION_CREATED = "POST_REACTION_CREATED"
    REPLY_REACTION_CREATED = "REPLY_REACTION_CREATED"


class NotificationState(str, Enum):
    UNDISMISSED = "UNDISMISSED"
    DISMISSED = "DISMISSED"


class InboxFilter(str, Enum):
    """Inbox filter of post listings; UNDISMISSED means UNREAD or READ."""

    UNREAD = "UNREAD"
    READ = "READ"
    DISMISSED = "DISMISSED"
    UNDISMISSED = "UNDISMISSED"
    ALL = "ALL"


class PostStateFilter(str, Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"
    ALL = "ALL"


class FollowingFilter(str, Enum):
    IS_FOLLOWING = "IS_FOLLOWING"
    ALL = "ALL"


class PostOrderField(str, Enum):
    POSTED_AT = "POSTED_AT"
    LAST_ACTIVITY_AT = "LAST_ACTIVITY_AT"
