"""Abstract repository for BackpackData records.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations (JSON files, SQLite) live in
the infrastructure layer.

Methods are blocking; the application layer runs them in worker
threads. Implementations must wrap every I/O or decoding failure in
``StorageError``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from mcbackpack.domain.model.backpack import BackpackData


class BackpackRepository(ABC):

    @abstractmethod
    def get_by_id(self, uuid: str) -> BackpackData | None:
        """Return the backpack with this uuid, or None if not found."""

    @abstractmethod
    def save(self, backpack: BackpackData) -> None:
        """Persist a new or updated backpack. Durable once this returns."""

    @abstractmethod
    def list_ids(self) -> list[str]:
        """Return the uuid of every stored backpack, sorted."""

    @abstractmethod
    def close(self) -> None:
        """Release file handles or connections. Safe to call twice."""
