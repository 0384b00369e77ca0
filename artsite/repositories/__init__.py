"""
Persistence adapters.

Backends store raw strings per (namespace, key): in memory, in a JSON file or
in SQL. Services only talk to PersistentStore, never to a backend directly.
"""

from .store import (
    ABOUT_IMAGE_KEY,
    ABOUT_TEXT_KEY,
    GALLERY_KEY,
    SHOP_KEY,
    PersistentStore,
    StorageError,
    StorageUnavailableError,
    build_backend,
)

__all__ = [
    "ABOUT_IMAGE_KEY",
    "ABOUT_TEXT_KEY",
    "GALLERY_KEY",
    "SHOP_KEY",
    "PersistentStore",
    "StorageError",
    "StorageUnavailableError",
    "build_backend",
]
