"""A thread-safe least-recently-used cache."""

import threading
from collections import OrderedDict
from typing import Any, Hashable


class LRUCache:
    """Fixed-capacity cache that evicts the least recently used entry."""

    def __init__(self, capacity: int) -> None:
        self.capacity = capacity
        self._items: "OrderedDict[Hashable, Any]" = OrderedDict()
        self._lock = threading.Lock()

    def add(self, key: Hashable, value: Any) -> None:
        """Store ``value`` under ``key`` and mark it most recently used."""
        with self._lock:
            self._items[key] = value
            self._items.move_to_end(key)
            if len(self._items) > self.capacity:
                self._items.popitem(last=False)

    def get(self, key: Hashable) -> Any:
        """Return the value for ``key`` and mark it used, or None if absent."""
        with self._lock:
            if key not in self._items:
                return None
            self._items.move_to_end(key)
            return self._items[key]

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._items

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)