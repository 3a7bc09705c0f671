"""Storage configuration: built-in defaults with optional env overrides.

Environment variables:
    MCBACKPACK_BACKEND          "json" (default) or "sqlite"
    MCBACKPACK_DATA_DIR         directory holding the data (default: <repo>/data)
    MCBACKPACK_SQLITE_FILE      database file name inside the data dir
    MCBACKPACK_BUSY_TIMEOUT_MS  SQLite busy timeout in milliseconds
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from mcbackpack.domain.exceptions import ValidationError

BACKENDS = ("json", "sqlite")

# When installed in editable mode the project root is the repo root.
_DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


@dataclass(frozen=True)
class StorageConfig:

    backend: str = "json"
    data_dir: Path = field(default_factory=lambda: _DEFAULT_DATA_DIR)
    sqlite_filename: str = "backpacks.sqlite"
    busy_timeout_ms: int = 5000

    def __post_init__(self) -> None:
        if self.backend not in BACKENDS:
            raise ValidationError(
                f"Unknown storage backend {self.backend!r} (expected one of {', '.join(BACKENDS)})"
            )
        if not self.sqlite_filename:
            raise ValidationError("SQLite file name must not be empty")
        if isinstance(self.busy_timeout_ms, bool) or not isinstance(self.busy_timeout_ms, int):
            raise ValidationError(
                f"Busy timeout must be an integer, got {type(self.busy_timeout_ms).__name__}"
            )
        if self.busy_timeout_ms < 0:
            raise ValidationError("Busy timeout cannot be negative")

    @property
    def sqlite_path(self) -> Path:
        return self.data_dir / self.sqlite_filename

    @staticmethod
    def from_env(environ: Mapping[str, str] | None = None) -> StorageConfig:
        env = os.environ if environ is None else environ
        overrides: dict = {}
        if env.get("MCBACKPACK_BACKEND"):
            overrides["backend"] = env["MCBACKPACK_BACKEND"].strip().lower()
        if env.get("MCBACKPACK_DATA_DIR"):
            overrides["data_dir"] = Path(env["MCBACKPACK_DATA_DIR"]).expanduser()
        if env.get("MCBACKPACK_SQLITE_FILE"):
            overrides["sqlite_filename"] = env["MCBACKPACK_SQLITE_FILE"]
        if env.get("MCBACKPACK_BUSY_TIMEOUT_MS"):
            raw = env["MCBACKPACK_BUSY_TIMEOUT_MS"]
            try:
                overrides["busy_timeout_ms"] = int(raw)
            except ValueError as exc:
                raise ValidationError(f"Invalid busy timeout: {raw!r}") from exc
        return StorageConfig(**overrides)
