"""BackpackData value object: the persisted state of one backpack.

Instances are immutable; every mutation produces a new record via
``dataclasses.replace`` so a half-updated backpack can never be observed.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from mcbackpack.domain.exceptions import ValidationError


@dataclass(frozen=True)
class BackpackData:
    """Identity, texture, credentials, capacity and contents of a backpack.

    Invariants:
    - ``uuid`` is a non-empty string and never changes
    - ``size`` is a positive slot count fixed at creation
    - ``pwd_hash == ""`` means the backpack is unlocked
    - ``content is None`` means nothing was ever saved (distinct from ``""``)
    """

    uuid: str
    texture: str
    pwd_hash: str
    size: int
    content: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.uuid, str) or not self.uuid:
            raise ValidationError("Backpack uuid must be a non-empty string")
        if not isinstance(self.texture, str):
            raise ValidationError(
                f"Backpack texture must be a string, got {type(self.texture).__name__}"
            )
        if not isinstance(self.pwd_hash, str):
            raise ValidationError(
                f"Password hash must be a string, got {type(self.pwd_hash).__name__}"
            )
        if isinstance(self.size, bool) or not isinstance(self.size, int):
            raise ValidationError(
                f"Backpack size must be an integer, got {type(self.size).__name__}"
            )
        if self.size <= 0:
            raise ValidationError(f"Backpack size must be positive, got {self.size}")
        if self.content is not None and not isinstance(self.content, str):
            raise ValidationError(
                f"Backpack content must be a string, got {type(self.content).__name__}"
            )

    # --- Queries --------------------------------------------------------------

    @property
    def is_locked(self) -> bool:
        return bool(self.pwd_hash)

    def matches_password(self, input_hash: str) -> bool:
        """True only if the backpack is locked and ``input_hash`` equals the stored hash.

        Hashing happens upstream; this is a plain string comparison.
        """
        return self.is_locked and self.pwd_hash == input_hash

    # --- Copy-on-write updates ------------------------------------------------

    def with_password(self, pwd_hash: str) -> BackpackData:
        return replace(self, pwd_hash=pwd_hash)

    def without_password(self) -> BackpackData:
        return replace(self, pwd_hash="")

    def with_content(self, content: str) -> BackpackData:
        return replace(self, content=content)

    def with_texture(self, texture: str) -> BackpackData:
        return replace(self, texture=texture)

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def new(uuid: str, texture: str, size: int) -> BackpackData:
        """A freshly created backpack: unlocked and never saved."""
        return BackpackData(uuid=uuid, texture=texture, pwd_hash="", size=size)

    def __repr__(self) -> str:
        # Keep the hash out of logs and tracebacks.
        content = "None" if self.content is None else f"<{len(self.content)} chars>"
        return (
            f"BackpackData(uuid={self.uuid!r}, texture={self.texture!r}, "
            f"locked={self.is_locked}, size={self.size}, content={content})"
        )
