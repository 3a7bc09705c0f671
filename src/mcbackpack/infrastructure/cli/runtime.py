"""Shared plumbing for CLI commands: run one store coroutine to completion."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from mcbackpack.application.backpack_store import BackpackStore
from mcbackpack.infrastructure.bootstrap import build_store
from mcbackpack.infrastructure.config import StorageConfig

T = TypeVar("T")


def run_with_store(
    config: StorageConfig,
    operation: Callable[[BackpackStore], Awaitable[T]],
) -> T:
    """Open a store, await ``operation(store)``, close the store.

    DomainException subclasses propagate to the calling command.
    """

    async def _run() -> T:
        async with build_store(config) as store:
            return await operation(store)

    return asyncio.run(_run())
