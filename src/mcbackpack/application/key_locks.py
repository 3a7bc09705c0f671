"""Per-key asyncio locks.

Operations on the same key run one at a time; operations on different
keys never wait on each other. Entries are reference counted and removed
once no task holds or waits on them, so the table only ever contains
keys that are currently busy.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field


@dataclass
class _KeyState:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class KeyedLocks:

    def __init__(self) -> None:
        self._states: dict[str, _KeyState] = {}

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        # Table updates happen between awaits, so they are atomic on the loop.
        state = self._states.get(key)
        if state is None:
            state = self._states[key] = _KeyState()
        state.users += 1
        try:
            async with state.lock:
                yield
        finally:
            state.users -= 1
            if state.users == 0:
                self._states.pop(key, None)

    def __len__(self) -> int:
        return len(self._states)

    def __contains__(self, key: object) -> bool:
        return key in self._states
