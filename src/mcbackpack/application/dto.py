"""Data Transfer Objects for displaying backpacks outside the domain.

The password hash never leaves the domain layer; only whether a
backpack is locked is exposed.
"""

from __future__ import annotations

from dataclasses import dataclass

from mcbackpack.domain.model.backpack import BackpackData


@dataclass(frozen=True)
class BackpackSummaryDTO:
    """Output: a backpack as displayed to an administrator."""

    uuid: str
    texture: str
    size: int
    locked: bool
    content_length: int | None  # None if nothing was ever saved

    @staticmethod
    def from_domain(backpack: BackpackData) -> BackpackSummaryDTO:
        return BackpackSummaryDTO(
            uuid=backpack.uuid,
            texture=backpack.texture,
            size=backpack.size,
            locked=backpack.is_locked,
            content_length=None if backpack.content is None else len(backpack.content),
        )
