"""
Centralized database layer for Level.

Structure:
- entities/: SQLModel table models organized by business domain
- repositories/: Data access layer organized by business domain
- pagination.py: Cursor-based connections over select statements
- session.py: Global engine and session factory management
- utils.py: Database utility functions (engine, session factory, schema creation)
"""

from .base import Base, new_id, utc_now
from .utils import create_all, create_engine, create_sessionmaker

__all__ = [
    "Base",
    "create_all",
    "create_engine",
    "create_sessionmaker",
    "new_id",
    "utc_now",
]
