"""Engine/session helpers for the SQL storage backend."""
from __future__ import annotations

from contextlib import contextmanager
from functools import lru_cache
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from artsite.core.config import get_settings

Base = declarative_base()


def _engine_options(url: str) -> dict:
    options: dict = {"future": True, "pool_pre_ping": True}
    if url.startswith("sqlite"):
        # Requests, the thread pool and CLI scripts may share one SQLite file.
        options["connect_args"] = {"check_same_thread": False}
    return options


@lru_cache
def get_engine():
    url = (get_settings().database_url or "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL must be configured when STORAGE_BACKEND=sql.")
    return create_engine(url, **_engine_options(url))


@lru_cache
def _get_sessionmaker():
    return sessionmaker(bind=get_engine(), autoflush=False, autocommit=False, future=True)


@contextmanager
def get_session() -> Iterator[Session]:
    session: Session = _get_sessionmaker()()
    try:
        yield session
    finally:
        session.close()
