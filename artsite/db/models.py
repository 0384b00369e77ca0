"""SQLAlchemy models mirroring the browser-style key-value layout."""
from __future__ import annotations

from sqlalchemy import Column, DateTime, String, Text, func

from .session import Base


class StorageEntry(Base):
    """One stored string per (visitor namespace, key), like a localStorage slot."""

    __tablename__ = "storage_entries"

    namespace = Column(String(128), primary_key=True)
    key = Column(String(128), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
