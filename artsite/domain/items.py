"""Records stored in the gallery, shop and about sections."""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional

DEFAULT_ABOUT_TEXT = (
    "Hi! I'm ChaoticColors. I create acrylic pour art that feels alive — "
    "full of motion, color and texture."
)
DEFAULT_PRICE = "From $39"


def _text(data: Mapping[str, Any], name: str, default: str = "") -> str:
    value = data.get(name, default)
    return value if isinstance(value, str) else default


@dataclass(frozen=True)
class AboutContent:
    text: str = DEFAULT_ABOUT_TEXT
    image_ref: str = ""

    @property
    def has_image(self) -> bool:
        return bool(self.image_ref)


@dataclass(frozen=True)
class NewItem:
    """Raw input for ``add``: just an image source, everything else defaults."""

    src: str


@dataclass(frozen=True)
class GalleryItem:
    src: str
    title: str = ""
    href: str = ""

    label = "Artwork"

    def to_dict(self) -> dict:
        return {"src": self.src, "title": self.title, "href": self.href}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GalleryItem":
        return cls(src=_text(data, "src"), title=_text(data, "title"), href=_text(data, "href"))

    def apply(self, patch: "GalleryPatch") -> "GalleryItem":
        return replace(self, **patch.changes())


@dataclass(frozen=True)
class ShopItem:
    src: str
    title: str = ""
    price: str = DEFAULT_PRICE
    href: str = ""

    label = "Product"

    def to_dict(self) -> dict:
        return {"src": self.src, "title": self.title, "price": self.price, "href": self.href}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ShopItem":
        return cls(
            src=_text(data, "src"),
            title=_text(data, "title"),
            price=_text(data, "price"),
            href=_text(data, "href"),
        )

    def apply(self, patch: "ShopPatch") -> "ShopItem":
        return replace(self, **patch.changes())


@dataclass(frozen=True)
class GalleryPatch:
    """Field-level update; None leaves the field untouched."""

    src: Optional[str] = None
    title: Optional[str] = None
    href: Optional[str] = None

    def changes(self) -> dict:
        return {k: v for k, v in vars(self).items() if v is not None}


@dataclass(frozen=True)
class ShopPatch:
    src: Optional[str] = None
    title: Optional[str] = None
    price: Optional[str] = None
    href: Optional[str] = None

    def changes(self) -> dict:
        return {k: v for k, v in vars(self).items() if v is not None}


@dataclass(frozen=True)
class ContactDraft:
    """Contact form fields; lives only for one request, never stored."""

    name: str = ""
    email: str = ""
    message: str = ""


def display_title(item, index: int) -> str:
    return item.title or f"{item.label} {index + 1}"


def display_price(item: ShopItem) -> str:
    return item.price or DEFAULT_PRICE


def link_target(href: str) -> dict:
    """Anchor attributes for a card's outbound link; empty links stay on the page."""
    if href:
        return {"href": href, "target": "_blank", "rel": "noreferrer"}
    return {"href": "#", "target": None, "rel": None}
