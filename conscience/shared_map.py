"""Copy-on-write mapping shared between request handlers."""

from __future__ import annotations

import threading
from typing import Generic, TypeVar

K = TypeVar("K")
V = TypeVar("V")


class SharedMap(Generic[K, V]):
    """Dictionary whose values are replaced whole.

    Writers copy the current dict, change the copy and publish it under a
    lock. Readers take the published reference without locking, so they
    never wait on each other or see a half-applied write. Values are
    expected to be immutable.
    """

    def __init__(self) -> None:
        self._items: dict[K, V] = {}
        self._write_lock = threading.Lock()

    def get(self, key: K) -> V | None:
        return self._items.get(key)

    def put(self, key: K, value: V) -> V | None:
        """Store value and return the previous one, if any."""
        with self._write_lock:
            items = dict(self._items)
            previous = items.get(key)
            items[key] = value
            self._items = items
            return previous

    def put_if_absent(self, key: K, value: V) -> bool:
        """Store value only when key is unused; return whether it was stored."""
        with self._write_lock:
            if key in self._items:
                return False
            items = dict(self._items)
            items[key] = value
            self._items = items
            return True

    def pop(self, key: K) -> V | None:
        with self._write_lock:
            if key not in self._items:
                return None
            items = dict(self._items)
            removed = items.pop(key)
            self._items = items
            return removed

    def values(self) -> list[V]:
        """Snapshot of current values in insertion order."""
        return list(self._items.values())

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def __len__(self) -> int:
        return len(self._items)
