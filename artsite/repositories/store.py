"""
Persistent key-value store with JSON encoding and silent fallbacks.

This plays the role the browser's localStorage plays for a static page: every
value is a JSON string under a versioned key, scoped to one visitor namespace.
Reads that fail for any reason return the caller's fallback; writes that fail
are dropped. Both are logged, neither is raised.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Iterable, Protocol

log = logging.getLogger(__name__)

ABOUT_TEXT_KEY = "cc_about_text_v1"
ABOUT_IMAGE_KEY = "cc_about_img_v1"
GALLERY_KEY = "cc_gallery_v1"
SHOP_KEY = "cc_shop_v1"

STORAGE_KEYS = (ABOUT_TEXT_KEY, ABOUT_IMAGE_KEY, GALLERY_KEY, SHOP_KEY)


class StorageError(Exception):
    """Base exception for storage backends."""


class StorageUnavailableError(StorageError):
    """Raised when a backend cannot read or write (quota, disabled, unreachable)."""


class StorageBackend(Protocol):
    """Raw string slots grouped by namespace."""

    def get_item(self, namespace: str, key: str) -> str | None: ...

    def set_item(self, namespace: str, key: str, value: str) -> None: ...

    def remove_item(self, namespace: str, key: str) -> None: ...

    def keys(self, namespace: str) -> list[str]: ...

    def namespaces(self) -> list[str]: ...


def namespace_size(items: Iterable[tuple[str, str]]) -> int:
    """Approximate byte usage of a namespace, the way browsers count quota."""
    return sum(len(k.encode("utf-8")) + len(v.encode("utf-8")) for k, v in items)


def ensure_quota(current: dict[str, str], key: str, value: str, quota_bytes: int) -> None:
    if quota_bytes <= 0:
        return
    projected = dict(current)
    projected[key] = value
    if namespace_size(projected.items()) > quota_bytes:
        raise StorageUnavailableError(f"Quota of {quota_bytes} bytes exceeded writing {key!r}")


class PersistentStore:
    """get/set with JSON encoding on top of a StorageBackend."""

    def __init__(self, backend: StorageBackend, namespace: str = "") -> None:
        self.backend = backend
        self.namespace = namespace

    def scoped(self, namespace: str) -> "PersistentStore":
        return PersistentStore(self.backend, namespace)

    def get(self, key: str, fallback: Any) -> Any:
        try:
            raw = self.backend.get_item(self.namespace, key)
        except StorageError as exc:
            log.warning("storage read failed for %s/%s: %s", self.namespace, key, exc)
            return fallback
        if not raw:
            return fallback
        try:
            return json.loads(raw)
        except ValueError:
            log.warning("discarding undecodable value at %s/%s", self.namespace, key)
            return fallback

    def set(self, key: str, value: Any) -> None:
        try:
            payload = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            log.warning("value for %s/%s is not JSON-serializable: %s", self.namespace, key, exc)
            return
        try:
            self.backend.set_item(self.namespace, key, payload)
        except StorageError as exc:
            log.warning("storage write failed for %s/%s: %s", self.namespace, key, exc)

    def remove(self, key: str) -> None:
        try:
            self.backend.remove_item(self.namespace, key)
        except StorageError as exc:
            log.warning("storage remove failed for %s/%s: %s", self.namespace, key, exc)


def build_backend(settings) -> StorageBackend:
    """Pick the backend named by STORAGE_BACKEND."""
    kind = settings.storage_backend
    if kind == "memory":
        from .memory_storage import MemoryStorage

        return MemoryStorage(quota_bytes=settings.storage_quota_bytes)
    if kind == "sql":
        from .sql_storage import SQLStorage

        return SQLStorage(quota_bytes=settings.storage_quota_bytes)
    from .json_storage import JsonFileStorage

    return JsonFileStorage(settings.data_file, quota_bytes=settings.storage_quota_bytes)
