"""Per-visitor site state (about, gallery, shop) and the visitor cookie."""
from __future__ import annotations

import re
import secrets
import threading
from collections import OrderedDict
from contextlib import contextmanager
from typing import Iterator, Optional

from fastapi import Request, Response

from artsite.core.config import get_settings
from artsite.repositories.memory_storage import MemoryStorage
from artsite.repositories.store import PersistentStore
from artsite.services.editors import AboutEditor, GalleryEditor, ShopEditor, ViewFlags

VISITOR_COOKIE_NAME = "visitor"
_VISITOR_RE = re.compile(r"[A-Za-z0-9_-]{16,64}")

UI_EVENTS = frozenset({"toggle_editing", "toggle_paste", "close_paste"})
_LOCK_STRIPES = 64


class Site:
    """Everything one visitor can edit, loaded from their store on creation."""

    def __init__(self, store: PersistentStore, views: Optional[dict[str, ViewFlags]] = None) -> None:
        views = views or {}
        self.store = store
        self.about = AboutEditor(store)
        self.gallery = GalleryEditor(store, views.get("gallery"))
        self.shop = ShopEditor(store, views.get("shop"))

    @property
    def views(self) -> dict[str, ViewFlags]:
        return {"gallery": self.gallery.view, "shop": self.shop.view}

    def collection(self, name: str):
        if name == "gallery":
            return self.gallery
        if name == "shop":
            return self.shop
        raise KeyError(name)

    def subscribe(self, listener):
        """Attach ``listener`` to every section; returns one unsubscribe callable."""
        undo = [editor.subscribe(listener) for editor in (self.about, self.gallery, self.shop)]

        def unsubscribe() -> None:
            for fn in undo:
                fn()

        return unsubscribe


class SiteRegistry:
    """
    Visitor id -> Site, rebuilt from a namespaced PersistentStore on every get.

    Collections are never cached here, so writes made by scripts or another
    worker are always seen. Only the edit/paste flags of visitors who toggled
    something are remembered, in an LRU map capped at ``max_visitors``.
    """

    def __init__(self, store: PersistentStore, max_visitors: int = 1024) -> None:
        self.store = store
        self.max_visitors = max(1, max_visitors)
        self._views: OrderedDict[str, dict[str, ViewFlags]] = OrderedDict()
        self._views_lock = threading.Lock()
        self._stripes = [threading.Lock() for _ in range(_LOCK_STRIPES)]

    def get(self, visitor_id: str) -> Site:
        with self._views_lock:
            views = self._views.get(visitor_id)
            if views is not None:
                self._views.move_to_end(visitor_id)
        site = Site(self.store.scoped(visitor_id), views)
        if views is None:
            def remember(editor, event: str) -> None:
                if event in UI_EVENTS:
                    self._remember(visitor_id, site.views)

            site.subscribe(remember)
        return site

    @contextmanager
    def locked(self, visitor_id: str) -> Iterator[Site]:
        """Load, mutate and write back one visitor's Site without interleaving."""
        with self._stripes[hash(visitor_id) % _LOCK_STRIPES]:
            yield self.get(visitor_id)

    def blank(self) -> Site:
        """Default content for a visitor with no id yet; reads nothing from the backend."""
        return Site(PersistentStore(MemoryStorage()))

    def _remember(self, visitor_id: str, views: dict[str, ViewFlags]) -> None:
        with self._views_lock:
            self._views[visitor_id] = views
            self._views.move_to_end(visitor_id)
            while len(self._views) > self.max_visitors:
                self._views.popitem(last=False)

    def forget(self, visitor_id: str) -> None:
        with self._views_lock:
            self._views.pop(visitor_id, None)

    def __contains__(self, visitor_id: str) -> bool:
        return visitor_id in self._views

    def __len__(self) -> int:
        return len(self._views)


def visitor_id(request: Request) -> str | None:
    """Return the visitor id carried by the cookie, if it looks like one of ours."""
    value = request.cookies.get(VISITOR_COOKIE_NAME) or ""
    return value if _VISITOR_RE.fullmatch(value) else None


def ensure_visitor_id(request: Request) -> str:
    return visitor_id(request) or secrets.token_urlsafe(24)


def set_visitor_cookie(response: Response, value: str) -> None:
    settings = get_settings()
    response.set_cookie(
        VISITOR_COOKIE_NAME,
        value,
        httponly=True,
        secure=settings.app_env == "prod",
        samesite="lax",
        max_age=settings.visitor_cookie_ttl_seconds,
        path="/",
    )
