"""
JSON-file persistence adapter.

The whole file is one mapping ``{namespace: {key: json_string}}``; each write
rewrites the file, which is fine for a single small site. The parsed file is
kept in memory and only re-read when its mtime or size changes, so reads are
cheap and edits made by another process are still picked up.
"""

from __future__ import annotations

from pathlib import Path
import json
import threading

from .store import StorageUnavailableError, ensure_quota


class JsonFileStorage:
    def __init__(self, path: str | Path, quota_bytes: int = 0) -> None:
        self.path = Path(path)
        self.quota_bytes = quota_bytes
        self._lock = threading.Lock()
        self._cache: dict = {}
        self._stamp: tuple[int, int] | None = None

    def _file_stamp(self) -> tuple[int, int] | None:
        try:
            stat = self.path.stat()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StorageUnavailableError(f"cannot stat {self.path}: {exc}") from exc
        return stat.st_mtime_ns, stat.st_size

    def _snapshot(self) -> dict:
        """Parsed file contents, shared; callers must not mutate it. Hold _lock."""
        stamp = self._file_stamp()
        if stamp is None:
            self._cache, self._stamp = {}, None
            return self._cache
        if stamp != self._stamp:
            try:
                with self.path.open("r", encoding="utf-8") as f:
                    data = json.load(f)
            except (OSError, ValueError) as exc:
                raise StorageUnavailableError(f"cannot read {self.path}: {exc}") from exc
            self._cache = data if isinstance(data, dict) else {}
            self._stamp = stamp
        return self._cache

    def load(self) -> dict:
        with self._lock:
            return {ns: dict(bucket) for ns, bucket in self._snapshot().items() if isinstance(bucket, dict)}

    def save(self, db: dict) -> None:
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(db, ensure_ascii=False, indent=2), encoding="utf-8")
            tmp.replace(self.path)
        except OSError as exc:
            raise StorageUnavailableError(f"cannot write {self.path}: {exc}") from exc
        self._cache, self._stamp = db, self._file_stamp()

    def _write(self, namespace: str, bucket: dict) -> None:
        # Copy-on-write: a failed save leaves the cached snapshot untouched.
        db = dict(self._snapshot())
        db[namespace] = bucket
        self.save(db)

    def get_item(self, namespace: str, key: str) -> str | None:
        with self._lock:
            bucket = self._snapshot().get(namespace) or {}
        value = bucket.get(key) if isinstance(bucket, dict) else None
        return value if isinstance(value, str) else None

    def set_item(self, namespace: str, key: str, value: str) -> None:
        with self._lock:
            current = self._snapshot().get(namespace)
            bucket = dict(current) if isinstance(current, dict) else {}
            ensure_quota(bucket, key, value, self.quota_bytes)
            bucket[key] = value
            self._write(namespace, bucket)

    def remove_item(self, namespace: str, key: str) -> None:
        with self._lock:
            current = self._snapshot().get(namespace)
            if isinstance(current, dict) and key in current:
                bucket = dict(current)
                del bucket[key]
                self._write(namespace, bucket)

    def keys(self, namespace: str) -> list[str]:
        with self._lock:
            bucket = self._snapshot().get(namespace)
            return sorted(bucket) if isinstance(bucket, dict) else []

    def namespaces(self) -> list[str]:
        with self._lock:
            return sorted(self._snapshot())
