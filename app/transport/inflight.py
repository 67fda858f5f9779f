from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Hashable, Set


class ActionInFlight(Exception):
    pass


class InFlightGuard:
    """
    Rejects a second submission for the same key while the first is still
    being committed. Keys are per action source (room, team); unrelated keys
    never block each other.
    """
    def __init__(self) -> None:
        self._busy: Set[Hashable] = set()
        self._lock = asyncio.Lock()

    async def try_acquire(self, key: Hashable) -> bool:
        async with self._lock:
            if key in self._busy:
                return False
            self._busy.add(key)
            return True

    async def release(self, key: Hashable) -> None:
        async with self._lock:
            self._busy.discard(key)

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        if not await self.try_acquire(key):
            raise ActionInFlight(f"An action is already being submitted for {key}")
        try:
            yield
        finally:
            await self.release(key)
