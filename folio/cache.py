"""Caller-owned, compute-once-per-key cache for parsed content."""

from __future__ import annotations

import threading
from typing import Callable, Generic, Hashable, TypeVar

T = TypeVar("T")


class DocumentCache(Generic[T]):
    """Read-through cache keyed by identifier.

    Entries are only ever added. Two concurrent misses for the same key block on
    a per-key lock, so the factory runs once per key. A factory that raises leaves
    no entry behind and the error propagates to the caller.
    """

    def __init__(self) -> None:
        self._entries: dict[Hashable, T] = {}
        self._locks: dict[Hashable, threading.Lock] = {}
        self._guard = threading.Lock()

    def get_or_create(self, key: Hashable, factory: Callable[[], T]) -> T:
        try:
            return self._entries[key]
        except KeyError:
            pass

        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())

        with lock:
            if key in self._entries:
                return self._entries[key]
            value = factory()
            self._entries[key] = value
            return value

    def get(self, key: Hashable) -> T | None:
        return self._entries.get(key)

    def clear(self) -> None:
        with self._guard:
            self._entries.clear()
            self._locks.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
