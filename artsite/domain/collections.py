"""
Pure transitions over an ordered collection.

Each function takes the previous tuple and returns the next one; the
positional index is the only identity an item has.
"""
from __future__ import annotations

from typing import Callable, Iterable, Sequence, TypeVar

T = TypeVar("T")


def append_items(prev: Sequence[T], new: Iterable[T]) -> tuple[T, ...]:
    return tuple(prev) + tuple(new)


def update_item(prev: Sequence[T], index: int, change: Callable[[T], T]) -> tuple[T, ...]:
    """Replace the item at ``index`` with ``change(item)``; out of range leaves it alone."""
    if index < 0 or index >= len(prev):
        return tuple(prev)
    items = list(prev)
    items[index] = change(items[index])
    return tuple(items)


def remove_item(prev: Sequence[T], index: int) -> tuple[T, ...]:
    if index < 0 or index >= len(prev):
        return tuple(prev)
    return tuple(prev[:index]) + tuple(prev[index + 1 :])


def reset_items(prev: Sequence[T]) -> tuple[T, ...]:
    return ()


def default_titles(label: str, start: int, count: int) -> list[str]:
    """["Artwork 3", "Artwork 4"] for label="Artwork", start=2, count=2."""
    return [f"{label} {start + i + 1}" for i in range(count)]
