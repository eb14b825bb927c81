"""Database module."""

from db.base import Base
from db.session import close_db, get_db, init_db

__all__ = ["Base", "get_db", "init_db", "close_db"]
