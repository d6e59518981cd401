"""Database access: engine and sessions.

Repositories live in :mod:`labelhub.core.storage.repositories`.
"""
from .database import Base, Database, get_db, init_db

__all__ = [
    "Base",
    "Database",
    "get_db",
    "init_db",
]
