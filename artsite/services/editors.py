"""
Editors for the about block, the gallery and the shop.

Every data mutation derives the next state from the editor's current
snapshot, writes the whole collection back to the store and then notifies
subscribers. UI toggles (edit mode, paste panel) notify but never write.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, fields
from typing import Callable, Iterable, Mapping, Optional, Union

from artsite.domain.collections import (
    append_items,
    default_titles,
    remove_item,
    reset_items,
    update_item,
)
from artsite.domain.items import (
    DEFAULT_ABOUT_TEXT,
    DEFAULT_PRICE,
    AboutContent,
    GalleryItem,
    GalleryPatch,
    NewItem,
    ShopItem,
    ShopPatch,
)
from artsite.repositories.store import (
    ABOUT_IMAGE_KEY,
    ABOUT_TEXT_KEY,
    GALLERY_KEY,
    SHOP_KEY,
    PersistentStore,
)

log = logging.getLogger(__name__)

Listener = Callable[[object, str], None]


class Observable:
    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener(editor, event)``; returns the unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: str) -> None:
        for listener in list(self._listeners):
            listener(self, event)


@dataclass
class ViewFlags:
    """Per-collection UI state; never written to the store."""

    editing: bool = True
    paste_open: bool = False


class CollectionEditor(Observable, ABC):
    """Ordered, persisted list of items plus its edit/paste UI flags."""

    item_type: type
    patch_type: type
    name = "collection"

    def __init__(self, store: PersistentStore, key: str, view: Optional[ViewFlags] = None) -> None:
        super().__init__()
        self.store = store
        self.key = key
        self.view = view if view is not None else ViewFlags()
        self.items: tuple = self._load()

    @property
    def editing(self) -> bool:
        return self.view.editing

    @property
    def paste_open(self) -> bool:
        return self.view.paste_open

    def _load(self) -> tuple:
        raw = self.store.get(self.key, [])
        if not isinstance(raw, list):
            log.warning("ignoring non-list value stored at %s", self.key)
            return ()
        return tuple(self.item_type.from_dict(r) for r in raw if isinstance(r, dict))

    def __len__(self) -> int:
        return len(self.items)

    def _commit(self, next_items: tuple, event: str) -> None:
        self.items = next_items
        self.store.set(self.key, [item.to_dict() for item in next_items])
        self._notify(event)

    @abstractmethod
    def _build(self, new: NewItem, title: str):
        """Turn a new src plus its default title into this collection's item type."""

    def add(self, new_items: Iterable[Union[NewItem, str]]) -> None:
        batch = [n if isinstance(n, NewItem) else NewItem(src=str(n)) for n in new_items]
        if not batch:
            return
        prev = self.items
        titles = default_titles(self.item_type.label, len(prev), len(batch))
        self._commit(append_items(prev, [self._build(n, t) for n, t in zip(batch, titles)]), "add")

    def update(self, index: int, patch) -> None:
        if index < 0 or index >= len(self.items):
            return
        if isinstance(patch, Mapping):
            # Keys this collection has no field for (price on the gallery) are ignored.
            known = {f.name for f in fields(self.patch_type)}
            patch = self.patch_type(**{k: v for k, v in patch.items() if k in known})
        self._commit(update_item(self.items, index, lambda item: item.apply(patch)), "update")

    def remove(self, index: int) -> None:
        if index < 0 or index >= len(self.items):
            return
        self._commit(remove_item(self.items, index), "remove")

    def reset(self) -> None:
        self._commit(reset_items(self.items), "reset")

    def toggle_editing(self) -> bool:
        self.view.editing = not self.view.editing
        self._notify("toggle_editing")
        return self.view.editing

    def toggle_paste(self) -> bool:
        self.view.paste_open = not self.view.paste_open
        self._notify("toggle_paste")
        return self.view.paste_open

    def close_paste(self) -> None:
        if self.view.paste_open:
            self.view.paste_open = False
            self._notify("close_paste")


class GalleryEditor(CollectionEditor):
    item_type = GalleryItem
    patch_type = GalleryPatch
    name = "gallery"

    def __init__(self, store: PersistentStore, view: Optional[ViewFlags] = None) -> None:
        super().__init__(store, GALLERY_KEY, view)

    def _build(self, new: NewItem, title: str) -> GalleryItem:
        return GalleryItem(src=new.src, title=title, href="")


class ShopEditor(CollectionEditor):
    item_type = ShopItem
    patch_type = ShopPatch
    name = "shop"

    def __init__(self, store: PersistentStore, view: Optional[ViewFlags] = None) -> None:
        super().__init__(store, SHOP_KEY, view)

    def _build(self, new: NewItem, title: str) -> ShopItem:
        return ShopItem(src=new.src, title=title, price=DEFAULT_PRICE, href="")


class AboutEditor(Observable):
    """Singleton about block; text and image persist under separate keys."""

    name = "about"

    def __init__(self, store: PersistentStore, default_text: str = DEFAULT_ABOUT_TEXT) -> None:
        super().__init__()
        self.store = store
        text = store.get(ABOUT_TEXT_KEY, default_text)
        image = store.get(ABOUT_IMAGE_KEY, "")
        self.content = AboutContent(
            text=text if isinstance(text, str) else default_text,
            image_ref=image if isinstance(image, str) else "",
        )

    def set_text(self, text: str) -> None:
        self.content = AboutContent(text=text or "", image_ref=self.content.image_ref)
        self.store.set(ABOUT_TEXT_KEY, self.content.text)
        self._notify("text")

    def set_image(self, image_ref: str) -> None:
        self.content = AboutContent(text=self.content.text, image_ref=image_ref or "")
        self.store.set(ABOUT_IMAGE_KEY, self.content.image_ref)
        self._notify("image")

    def remove_image(self) -> None:
        self.set_image("")
