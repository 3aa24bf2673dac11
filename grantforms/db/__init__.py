"""Database bootstrap utilities.

Exposes engine and session construction for the SQL application store. No
ORM models leak into route handlers.
"""

from grantforms.db.base import get_engine, get_sessionmaker

__all__ = ["get_engine", "get_sessionmaker"]
