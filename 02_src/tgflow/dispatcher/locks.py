"""Per-identity locks."""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator

from ..models import Identity


class IdentityLocks:
    """One FIFO lock per identity, dropped as soon as nobody holds or waits."""

    def __init__(self) -> None:
        self._locks: dict[Identity, asyncio.Lock] = {}
        self._holders: dict[Identity, int] = {}

    @asynccontextmanager
    async def hold(self, identity: Identity) -> AsyncIterator[None]:
        lock = self._locks.setdefault(identity, asyncio.Lock())
        self._holders[identity] = self._holders.get(identity, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[identity] -= 1
            if not self._holders[identity]:
                del self._holders[identity]
                del self._locks[identity]

    def __len__(self) -> int:
        return len(self._locks)
