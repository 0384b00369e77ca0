"""Key-value slots backed by SQLAlchemy (STORAGE_BACKEND=sql)."""
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from artsite.db.models import StorageEntry
from artsite.db.session import get_session

from .store import StorageUnavailableError, ensure_quota


class SQLStorage:
    """CRUD helpers wrapping the SQLAlchemy session."""

    def __init__(self, quota_bytes: int = 0) -> None:
        self.quota_bytes = quota_bytes

    def get_item(self, namespace: str, key: str) -> str | None:
        try:
            with get_session() as session:
                entity = session.get(StorageEntry, (namespace, key))
                return entity.value if entity else None
        except SQLAlchemyError as exc:
            raise StorageUnavailableError(str(exc)) from exc

    def set_item(self, namespace: str, key: str, value: str) -> None:
        now = datetime.now(timezone.utc)
        try:
            with get_session() as session:
                if self.quota_bytes > 0:
                    rows = session.execute(
                        select(StorageEntry.key, StorageEntry.value).where(StorageEntry.namespace == namespace)
                    ).all()
                    ensure_quota({k: v for k, v in rows}, key, value, self.quota_bytes)
                entity = session.get(StorageEntry, (namespace, key))
                if not entity:
                    entity = StorageEntry(namespace=namespace, key=key, value=value, updated_at=now)
                    session.add(entity)
                else:
                    entity.value = value
                    entity.updated_at = now
                session.commit()
        except SQLAlchemyError as exc:
            raise StorageUnavailableError(str(exc)) from exc

    def remove_item(self, namespace: str, key: str) -> None:
        try:
            with get_session() as session:
                session.execute(
                    delete(StorageEntry).where(StorageEntry.namespace == namespace, StorageEntry.key == key)
                )
                session.commit()
        except SQLAlchemyError as exc:
            raise StorageUnavailableError(str(exc)) from exc

    def keys(self, namespace: str) -> list[str]:
        try:
            with get_session() as session:
                stmt = select(StorageEntry.key).where(StorageEntry.namespace == namespace).order_by(StorageEntry.key)
                return list(session.execute(stmt).scalars().all())
        except SQLAlchemyError as exc:
            raise StorageUnavailableError(str(exc)) from exc

    def namespaces(self) -> list[str]:
        try:
            with get_session() as session:
                stmt = select(StorageEntry.namespace).distinct().order_by(StorageEntry.namespace)
                return list(session.execute(stmt).scalars().all())
        except SQLAlchemyError as exc:
            raise StorageUnavailableError(str(exc)) from exc
