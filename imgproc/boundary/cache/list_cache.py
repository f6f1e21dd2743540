"""
Per-owner job listing cache.

Holds one listing snapshot per owner for a fixed TTL. Entries expire on
access and are dropped on any mutation affecting that owner's jobs.

Dependencies: None
System role: Read-through cache for GET /jobs
"""

import time
from collections import OrderedDict
from collections.abc import Callable
from typing import Any, Protocol


class ListCache(Protocol):
    """Cache contract used by the job service."""

    def get(self, owner_id: str) -> Any | None: ...

    def put(self, owner_id: str, data: Any) -> None: ...

    def invalidate(self, owner_id: str) -> None: ...


class TTLListCache:
    """
    Fixed-TTL map keyed by owner.

    Unbounded unless max_entries is set, in which case the oldest-inserted
    entry is evicted first. No locking: each operation touches a single key.
    """

    def __init__(
        self,
        ttl_seconds: float = 30.0,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, tuple[float, Any]] = OrderedDict()

    def get(self, owner_id: str) -> Any | None:
        entry = self._entries.get(owner_id)
        if entry is None:
            return None
        expires_at, data = entry
        if self._clock() >= expires_at:
            self._entries.pop(owner_id, None)
            return None
        return data

    def put(self, owner_id: str, data: Any) -> None:
        self._entries.pop(owner_id, None)
        self._entries[owner_id] = (self._clock() + self._ttl, data)
        if self._max_entries is not None:
            while len(self._entries) > self._max_entries:
                self._entries.popitem(last=False)

    def invalidate(self, owner_id: str) -> None:
        self._entries.pop(owner_id, None)

    def __len__(self) -> int:
        return len(self._entries)
