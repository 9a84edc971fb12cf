"""Per-user locking for conversation steps."""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator


class UserLocks:
    """One asyncio.Lock per Telegram user, created on demand.

    A lock is dropped again once nobody holds or waits for it, so the
    registry only grows with the number of users active at the same moment.
    """

    def __init__(self) -> None:
        self._locks: dict[int, asyncio.Lock] = {}
        self._users: dict[int, int] = {}

    @asynccontextmanager
    async def hold(self, telegram_id: int) -> AsyncIterator[None]:
        """Serialize everything done for `telegram_id` inside the block."""
        lock = self._locks.setdefault(telegram_id, asyncio.Lock())
        self._users[telegram_id] = self._users.get(telegram_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[telegram_id] -= 1
            if self._users[telegram_id] == 0:
                del self._users[telegram_id]
                del self._locks[telegram_id]

    def __len__(self) -> int:
        return len(self._locks)
