"""The asynchronous, credential-gated backpack store.

Implements the BackpackProvider contract on top of a blocking
BackpackRepository:

- every operation on a uuid runs under that uuid's lock, so
  read-modify-write sequences (``delete_pwd``, ``save``, ...) are atomic
  with respect to other operations on the same backpack;
- operations on different uuids never share a lock;
- repository calls run in worker threads (``asyncio.to_thread``) so the
  event loop only suspends at the lock and at the I/O boundary;
- a cancelled operation keeps its lock until its worker thread returns;
- ``close()`` refuses new work, waits for in-flight operations, then
  closes the repository.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import TypeVar

from mcbackpack.application.backpack_provider import BackpackProvider
from mcbackpack.application.key_locks import KeyedLocks
from mcbackpack.domain.exceptions import (
    DuplicateEntityError,
    EntityNotFoundError,
    StoreClosedError,
    ValidationError,
)
from mcbackpack.domain.model.backpack import BackpackData
from mcbackpack.domain.repository.backpack_repository import BackpackRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BackpackStore(BackpackProvider):

    def __init__(self, repository: BackpackRepository) -> None:
        self._repo = repository
        self._locks = KeyedLocks()
        self._closed = False
        self._in_flight = 0
        self._idle = asyncio.Event()
        self._idle.set()
        self._shutdown = asyncio.Event()

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def __aenter__(self) -> BackpackStore:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # --- BackpackProvider interface -------------------------------------------

    async def create(self, uuid: str, texture: str, size: int) -> None:
        async with self._operation(uuid):
            # Validates size before touching storage.
            backpack = BackpackData.new(uuid=uuid, texture=texture, size=size)
            if await self._get(uuid) is not None:
                raise DuplicateEntityError(f"Backpack '{uuid}' already exists")
            await self._put(backpack)
        logger.info("Created backpack %s (size=%d)", uuid, size)

    async def open(self, uuid: str) -> BackpackData:
        async with self._operation(uuid):
            return await self._load(uuid)

    async def set_pwd(self, uuid: str, pwd_hash: str) -> None:
        async with self._operation(uuid):
            _require_hash(pwd_hash)
            backpack = await self._load(uuid)
            await self._put(backpack.with_password(pwd_hash))
        logger.info("Password set on backpack %s", uuid)

    async def check_pwd(self, uuid: str, input_hash: str) -> bool:
        async with self._operation(uuid):
            _require_str(input_hash, "input hash")
            backpack = await self._load(uuid)
            return backpack.matches_password(input_hash)

    async def change_pwd(self, uuid: str, new_hash: str) -> None:
        """Replace the password hash.

        The previous password is not verified here; callers that need that
        check run ``check_pwd`` first.
        """
        async with self._operation(uuid):
            _require_hash(new_hash)
            backpack = await self._load(uuid)
            await self._put(backpack.with_password(new_hash))
        logger.info("Password changed on backpack %s", uuid)

    async def delete_pwd(self, uuid: str, input_hash: str) -> bool:
        async with self._operation(uuid):
            _require_str(input_hash, "input hash")
            backpack = await self._load(uuid)
            if not backpack.matches_password(input_hash):
                logger.debug("Password removal rejected for backpack %s", uuid)
                return False
            await self._put(backpack.without_password())
        logger.info("Password removed from backpack %s", uuid)
        return True

    async def save(self, uuid: str, content: str) -> None:
        async with self._operation(uuid):
            _require_str(content, "content")
            backpack = await self._load(uuid)
            await self._put(backpack.with_content(content))
        logger.debug("Saved %d chars of content to backpack %s", len(content), uuid)

    async def set_texture(self, uuid: str, texture: str) -> None:
        async with self._operation(uuid):
            _require_str(texture, "texture")
            backpack = await self._load(uuid)
            await self._put(backpack.with_texture(texture))
        logger.debug("Texture updated on backpack %s", uuid)

    async def list_ids(self) -> list[str]:
        """Return every stored uuid.

        Not tied to any single backpack, so it takes no per-uuid lock; the
        result is a snapshot that concurrent creates may already have outdated.
        """
        async with self._admitted():
            return await self._in_thread(self._repo.list_ids)

    async def close(self) -> None:
        """Shut the store down.

        New operations fail with StoreClosedError as soon as this is called.
        Operations already running finish first; then the repository is
        closed. A second call waits for the first one and returns.
        """
        if self._closed:
            await self._shutdown.wait()
            return

        self._closed = True
        logger.info("Closing backpack store (%d operations in flight)", self._in_flight)
        try:
            await self._idle.wait()
            await asyncio.to_thread(self._repo.close)
        finally:
            self._shutdown.set()
        logger.info("Backpack store closed")

    # --- Internal helpers -----------------------------------------------------

    @asynccontextmanager
    async def _admitted(self) -> AsyncIterator[None]:
        """Refuse work after close and count what is in flight."""
        if self._closed:
            raise StoreClosedError("Backpack store is closed")

        self._in_flight += 1
        self._idle.clear()
        try:
            yield
        finally:
            self._in_flight -= 1
            if self._in_flight == 0:
                self._idle.set()

    @asynccontextmanager
    async def _operation(self, uuid: str) -> AsyncIterator[None]:
        """Admission, in-flight accounting and the per-uuid lock."""
        if self._closed:
            raise StoreClosedError("Backpack store is closed")
        if not isinstance(uuid, str) or not uuid:
            raise ValidationError("Backpack uuid must be a non-empty string")

        async with self._admitted():
            async with self._locks.hold(uuid):
                yield

    async def _in_thread(self, func: Callable[..., T], *args: object) -> T:
        """Run blocking repository I/O in a worker thread.

        A worker thread cannot be interrupted, so if the calling task is
        cancelled this still waits for the thread to finish before
        re-raising. The per-uuid lock and the in-flight count are therefore
        held until the I/O is really over.
        """
        fut = asyncio.ensure_future(asyncio.to_thread(func, *args))
        try:
            return await asyncio.shield(fut)
        except asyncio.CancelledError:
            while not fut.done():
                try:
                    await asyncio.wait({fut})
                except asyncio.CancelledError:
                    continue
            if not fut.cancelled() and fut.exception() is not None:
                logger.error("Repository call finished after cancellation: %s", fut.exception())
            raise

    async def _get(self, uuid: str) -> BackpackData | None:
        return await self._in_thread(self._repo.get_by_id, uuid)

    async def _load(self, uuid: str) -> BackpackData:
        backpack = await self._get(uuid)
        if backpack is None:
            raise EntityNotFoundError(f"Backpack '{uuid}' not found")
        return backpack

    async def _put(self, backpack: BackpackData) -> None:
        await self._in_thread(self._repo.save, backpack)


def _require_str(value: object, what: str) -> None:
    if not isinstance(value, str):
        raise ValidationError(f"Backpack {what} must be a string, got {type(value).__name__}")


def _require_hash(value: object) -> None:
    if not isinstance(value, str) or not value:
        raise ValidationError("Password hash must be a non-empty string")
