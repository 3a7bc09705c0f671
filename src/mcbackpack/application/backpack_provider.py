"""Abstract provider: the asynchronous contract plugins use to reach backpacks.

Every operation is a coroutine. Failures surface as DomainException
subclasses raised from the awaited call.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from mcbackpack.domain.model.backpack import BackpackData


class BackpackProvider(ABC):

    @abstractmethod
    async def create(self, uuid: str, texture: str, size: int) -> None:
        """Create a new, unlocked, empty backpack."""

    @abstractmethod
    async def open(self, uuid: str) -> BackpackData:
        """Return the current state of a backpack."""

    @abstractmethod
    async def set_pwd(self, uuid: str, pwd_hash: str) -> None:
        """Set the password hash without checking the previous one."""

    @abstractmethod
    async def check_pwd(self, uuid: str, input_hash: str) -> bool:
        """Return True if ``input_hash`` equals the stored hash."""

    @abstractmethod
    async def change_pwd(self, uuid: str, new_hash: str) -> None:
        """Replace the stored password hash."""

    @abstractmethod
    async def delete_pwd(self, uuid: str, input_hash: str) -> bool:
        """Remove password protection if ``input_hash`` matches."""

    @abstractmethod
    async def save(self, uuid: str, content: str) -> None:
        """Replace the serialized inventory content."""

    @abstractmethod
    async def set_texture(self, uuid: str, texture: str) -> None:
        """Replace the texture string."""

    @abstractmethod
    async def close(self) -> None:
        """Stop accepting work, drain in-flight operations, release storage."""
