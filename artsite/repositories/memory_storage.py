"""In-process backend, used by tests and STORAGE_BACKEND=memory."""

from __future__ import annotations

import threading

from .store import StorageUnavailableError, ensure_quota


class MemoryStorage:
    def __init__(self, quota_bytes: int = 0, *, disabled: bool = False) -> None:
        self._data: dict[str, dict[str, str]] = {}
        self._lock = threading.Lock()
        self.quota_bytes = quota_bytes
        # Mimics a browser with storage turned off: every call fails.
        self.disabled = disabled

    def _check(self) -> None:
        if self.disabled:
            raise StorageUnavailableError("storage disabled")

    def get_item(self, namespace: str, key: str) -> str | None:
        self._check()
        with self._lock:
            return self._data.get(namespace, {}).get(key)

    def set_item(self, namespace: str, key: str, value: str) -> None:
        self._check()
        with self._lock:
            bucket = self._data.setdefault(namespace, {})
            ensure_quota(bucket, key, value, self.quota_bytes)
            bucket[key] = value

    def remove_item(self, namespace: str, key: str) -> None:
        self._check()
        with self._lock:
            self._data.get(namespace, {}).pop(key, None)

    def keys(self, namespace: str) -> list[str]:
        self._check()
        with self._lock:
            return sorted(self._data.get(namespace, {}))

    def namespaces(self) -> list[str]:
        self._check()
        with self._lock:
            return sorted(self._data)
