"""Registry of every outstanding listener handle, keyed by a monotonic id."""

import itertools
from typing import Dict, Iterator, Optional

from hearken.domain.disposable import Subscription


class ListenerRegistry:
    """Table of live handles owned by one dispatcher.

    Entries are only added; the table is cleared in bulk by ``dispose_all``.
    """

    def __init__(self):
        self._entries: Dict[int, Subscription] = {}
        self._ids = itertools.count()

    def next_id(self) -> int:
        return next(self._ids)

    def add(self, key: int, handle: Subscription) -> int:
        if key in self._entries:
            raise KeyError(f"listener id {key} already registered")
        self._entries[key] = handle
        return key

    def get(self, key: int) -> Optional[Subscription]:
        return self._entries.get(key)

    def active(self) -> Iterator[Subscription]:
        return (h for h in self._entries.values() if not h.disposed)

    def dispose_all(self) -> int:
        """Dispose every handle and clear the table. Returns the count disposed."""
        count = 0
        entries, self._entries = self._entries, {}
        for handle in entries.values():
            if not handle.disposed:
                count += 1
            handle.dispose()
        return count

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
