"""Domain enums shared by entities, services and the API."""

from .enums import (
    FollowingFilter,
    GroupRole,
    GroupState,
    InboxFilter,
    InboxState,
    InvitationState,
    NotificationEvent,
    NotificationState,
    PostLogEvent,
    PostOrderField,
    PostState,
    PostStateFilter,
    SpaceState,
    SpaceUserRole,
    SpaceUserState,
    SubscriptionState,
    UserState,
)

__all__ = [
    "FollowingFilter",
    "GroupRole",
    "GroupState",
    "InboxFilter",
    "InboxState",
    "InvitationState",
    "NotificationEvent",
    "NotificationState",
    "PostLogEvent",
    "PostOrderField",
    "PostState",
    "PostStateFilter",
    "SpaceState",
    "SpaceUserRole",
    "SpaceUserState",
    "SubscriptionState",
    "UserState",
]
