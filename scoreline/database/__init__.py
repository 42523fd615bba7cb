"""
Storage for the scoring engine.

Holds the SQLAlchemy schema, the async database manager, Alembic migrations
and the repository used by both scoring paths.
"""
from .init import initialize
from .dbm import DBM

__all__ = ["initialize", "DBM"]
