"""
Repository layer.

This package contains async repositories organized by business domain. Each
repository wraps one entity with the generic CRUD operations of
``AsyncBaseRepository`` plus the queries its services need.
"""

from .base import AsyncBaseRepository
from .bundle import RepoBundle, build_repos
from .groups import visible_group_ids
from .posts import visible_post_ids

__all__ = [
    "AsyncBaseRepository",
    "RepoBundle",
    "build_repos",
    "visible_group_ids",
    "visible_post_ids",
]
