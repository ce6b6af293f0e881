"""
I/O models for API requests.

This package contains Pydantic-based input schemas validated by the services
before any write. These models are separate from database entities to allow
independent evolution of API contracts.
"""

from .accounts import Credentials, UserCreate, UserUpdate
from .posts import BodyInput, NudgeInput, ReactionInput, SearchInput
from .spaces import GroupCreate, GroupUpdate, SpaceCreate, SpaceUpdate
from .validation import validate

__all__ = [
    "BodyInput",
    "Credentials",
    "GroupCreate",
    "GroupUpdate",
    "NudgeInput",
    "ReactionInput",
    "SearchInput",
    "SpaceCreate",
    "SpaceUpdate",
    "UserCreate",
    "UserUpdate",
    "validate",
]
