"""Keyed Locks — one asyncio.Lock per key, created on first use.

Invariants:
    - Two holders of the same key never run their critical sections concurrently
    - Locks are per-process; they do not coordinate separate workers

Design Decisions:
    - Lock entries are dropped once no coroutine holds or waits on them,
      so the registry does not grow with every cart id ever seen
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncGenerator


class KeyedLocks:
    """Registry of per-key exclusive sections."""

    def __init__(self):
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncGenerator[None, None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)
