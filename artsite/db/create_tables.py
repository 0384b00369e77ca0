"""Create the storage_entries table for STORAGE_BACKEND=sql."""
from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

from .session import Base, get_engine
from . import models  # noqa: F401  # registers StorageEntry on the metadata


def create_all(engine=None) -> list[str]:
    engine = engine or get_engine()
    Base.metadata.create_all(bind=engine)
    return sorted(Base.metadata.tables)


if __name__ == "__main__":
    try:
        tables = create_all()
        print(f"Tables ready: {', '.join(tables)}")
    except SQLAlchemyError as exc:
        raise SystemExit(f"Failed to create tables: {exc}") from exc
