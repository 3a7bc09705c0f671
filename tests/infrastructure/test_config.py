"""Tests for StorageConfig and the composition root."""

from pathlib import Path

import pytest

from mcbackpack.application.backpack_store import BackpackStore
from mcbackpack.domain.exceptions import ValidationError
from mcbackpack.infrastructure.bootstrap import build_repository, build_store
from mcbackpack.infrastructure.config import StorageConfig
from mcbackpack.infrastructure.persistence.json_backpack_repository import (
    JsonBackpackRepository,
)
from mcbackpack.infrastructure.persistence.sqlite_backpack_repository import (
    SqliteBackpackRepository,
)


class TestStorageConfig:

    def test_defaults(self):
        config = StorageConfig.from_env({})
        assert config.backend == "json"
        assert config.data_dir.name == "data"
        assert config.sqlite_path == config.data_dir / "backpacks.sqlite"

    def test_env_overrides(self, tmp_path):
        config = StorageConfig.from_env({
            "MCBACKPACK_BACKEND": " SQLite ",
            "MCBACKPACK_DATA_DIR": str(tmp_path),
            "MCBACKPACK_SQLITE_FILE": "bp.db",
            "MCBACKPACK_BUSY_TIMEOUT_MS": "250",
        })
        assert config.backend == "sqlite"
        assert config.data_dir == Path(tmp_path)
        assert config.sqlite_path == Path(tmp_path) / "bp.db"
        assert config.busy_timeout_ms == 250

    def test_unknown_backend_rejected(self):
        with pytest.raises(ValidationError, match="Unknown storage backend"):
            StorageConfig.from_env({"MCBACKPACK_BACKEND": "redis"})

    def test_bad_timeout_rejected(self):
        with pytest.raises(ValidationError, match="Invalid busy timeout"):
            StorageConfig.from_env({"MCBACKPACK_BUSY_TIMEOUT_MS": "soon"})

    def test_negative_timeout_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            StorageConfig(busy_timeout_ms=-1)

    @pytest.mark.parametrize("value", ["5", 2.5, True])
    def test_non_integer_timeout_rejected(self, value):
        with pytest.raises(ValidationError, match="must be an integer"):
            StorageConfig(busy_timeout_ms=value)


class TestBootstrap:

    def test_json_backend(self, tmp_path):
        repo = build_repository(StorageConfig(backend="json", data_dir=tmp_path))
        assert isinstance(repo, JsonBackpackRepository)
        assert (tmp_path / "backpacks").is_dir()

    def test_sqlite_backend(self, tmp_path):
        repo = build_repository(StorageConfig(backend="sqlite", data_dir=tmp_path))
        assert isinstance(repo, SqliteBackpackRepository)
        repo.close()
        assert (tmp_path / "backpacks.sqlite").exists()

    @pytest.mark.asyncio
    async def test_build_store(self, tmp_path):
        store = build_store(StorageConfig(data_dir=tmp_path))
        assert isinstance(store, BackpackStore)
        await store.create("p1", "tex", 9)
        await store.close()
