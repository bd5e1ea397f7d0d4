"""Descriptor cache - one descriptor per class for the life of the process."""

from __future__ import annotations

import threading
from typing import Callable

from .descriptors import TypeDescriptor


class DescriptorCache:
    """Insert-if-absent map from class to its descriptor.

    Keys are the class objects themselves. Lookups are lock-free; only a miss
    takes the lock, so a class is built at most once per cache. Entries are
    never replaced or evicted.
    """

    def __init__(self) -> None:
        self._entries: dict[type, TypeDescriptor] = {}
        self._lock: threading.Lock = threading.Lock()

    def get(self, cls: type) -> TypeDescriptor | None:
        return self._entries.get(cls)

    def get_or_build(self, cls: type, build: Callable[[type], TypeDescriptor]) -> TypeDescriptor:
        found = self._entries.get(cls)
        if found is not None:
            return found
        with self._lock:
            found = self._entries.get(cls)
            if found is not None:
                return found
            desc = build(cls)
            self._entries[cls] = desc
            return desc

    def __contains__(self, cls: object) -> bool:
        return cls in self._entries

    def __len__(self) -> int:
        return len(self._entries)
