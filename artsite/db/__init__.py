"""SQL storage backend plumbing (engine, sessions, the key-value table)."""

from .session import Base, get_engine, get_session
from .models import StorageEntry

__all__ = ["Base", "StorageEntry", "get_engine", "get_session"]
