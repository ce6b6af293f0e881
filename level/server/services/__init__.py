"""
Domain services.

Each service wraps one session (one unit of work) and the process event
broker. Services validate input, enforce permissions, stage changes through
the repositories and commit.
"""

from .accounts import AccountService
from .base import BaseService
from .digests import DigestService
from .events import Broker, Event, Subscription, broker, get_broker
from .groups import GroupService
from .mentions import MentionService, extract_handles
from .notifications import NotificationService
from .posts import PostService
from .reactions import ReactionService
from .rendering import render_body
from .replies import ReplyService
from .search import SearchService
from .spaces import SpaceService

__all__ = [
    "AccountService",
    "BaseService",
    "Broker",
    "DigestService",
    "Event",
    "GroupService",
    "MentionService",
    "NotificationService",
    "PostService",
    "ReactionService",
    "ReplyService",
    "SearchService",
    "SpaceService",
    "Subscription",
    "broker",
    "extract_handles",
    "get_broker",
    "render_body",
]
