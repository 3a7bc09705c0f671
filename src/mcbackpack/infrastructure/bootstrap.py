"""Composition root: builds the configured repository and the store on top of it.

This is the only module that knows about every layer.
"""

from __future__ import annotations

import logging

from mcbackpack.application.backpack_store import BackpackStore
from mcbackpack.domain.repository.backpack_repository import BackpackRepository
from mcbackpack.infrastructure.config import StorageConfig
from mcbackpack.infrastructure.persistence.json_backpack_repository import (
    JsonBackpackRepository,
)
from mcbackpack.infrastructure.persistence.sqlite_backpack_repository import (
    SqliteBackpackRepository,
)

logger = logging.getLogger(__name__)


def build_repository(config: StorageConfig) -> BackpackRepository:
    if config.backend == "sqlite":
        logger.debug("Using SQLite backpack storage at %s", config.sqlite_path)
        return SqliteBackpackRepository(config.sqlite_path, config.busy_timeout_ms)
    logger.debug("Using JSON backpack storage in %s", config.data_dir)
    return JsonBackpackRepository(config.data_dir / "backpacks")


def build_store(config: StorageConfig | None = None) -> BackpackStore:
    return BackpackStore(build_repository(config or StorageConfig.from_env()))
