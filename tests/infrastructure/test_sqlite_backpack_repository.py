"""Tests for the SQLite repository."""

import asyncio
import sqlite3

import pytest

from mcbackpack.application.backpack_store import BackpackStore
from mcbackpack.domain.exceptions import StorageError
from mcbackpack.domain.model.backpack import BackpackData
from mcbackpack.infrastructure.persistence.sqlite_backpack_repository import (
    SqliteBackpackRepository,
)


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "db" / "backpacks.sqlite"


class TestSqliteRepository:

    def test_missing_returns_none(self, db_path):
        repo = SqliteBackpackRepository(db_path)
        assert repo.get_by_id("ghost") is None
        repo.close()

    def test_upsert_and_reload(self, db_path):
        repo = SqliteBackpackRepository(db_path)
        b = BackpackData.new("p1", "tex", 27)
        repo.save(b)
        repo.save(b.with_content("AAAA").with_password("h1"))
        repo.close()

        reopened = SqliteBackpackRepository(db_path)
        assert reopened.get_by_id("p1") == BackpackData(
            uuid="p1", texture="tex", pwd_hash="h1", size=27, content="AAAA"
        )
        assert reopened.list_ids() == ["p1"]
        reopened.close()

    def test_list_ids_sorted(self, db_path):
        repo = SqliteBackpackRepository(db_path)
        for uuid in ["c", "a", "b"]:
            repo.save(BackpackData.new(uuid, "tex", 9))
        assert repo.list_ids() == ["a", "b", "c"]
        repo.close()

    def test_close_is_idempotent_and_blocks_further_use(self, db_path):
        repo = SqliteBackpackRepository(db_path)
        repo.close()
        repo.close()
        with pytest.raises(StorageError, match="closed"):
            repo.get_by_id("p1")

    def test_invalid_row_reported_as_storage_error(self, db_path):
        repo = SqliteBackpackRepository(db_path)
        repo.close()
        with sqlite3.connect(db_path) as conn:
            conn.execute(
                "INSERT INTO backpacks (uuid, texture, pwd_hash, size, content) "
                "VALUES ('p1', 'tex', NULL, 0, NULL)"
            )
        conn.close()

        repo = SqliteBackpackRepository(db_path)
        with pytest.raises(StorageError, match="Corrupt"):
            repo.get_by_id("p1")
        repo.close()

    def test_unopenable_path_reported_as_storage_error(self, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("", encoding="utf-8")
        with pytest.raises(StorageError, match="Could not open"):
            SqliteBackpackRepository(blocker / "backpacks.sqlite")


class TestSqliteRepositoryWithStore:

    @pytest.mark.asyncio
    async def test_concurrent_saves_across_backpacks(self, db_path):
        async with BackpackStore(SqliteBackpackRepository(db_path)) as store:
            await asyncio.gather(*(store.create(f"p{i}", "tex", 9) for i in range(10)))
            await asyncio.gather(*(store.save(f"p{i}", f"content-{i}") for i in range(10)))

            for i in range(10):
                assert (await store.open(f"p{i}")).content == f"content-{i}"

    @pytest.mark.asyncio
    async def test_password_lifecycle_persists(self, db_path):
        async with BackpackStore(SqliteBackpackRepository(db_path)) as store:
            await store.create("p1", "tex", 9)
            await store.set_pwd("p1", "h1")

        async with BackpackStore(SqliteBackpackRepository(db_path)) as store:
            assert await store.delete_pwd("p1", "h1") is True

        async with BackpackStore(SqliteBackpackRepository(db_path)) as store:
            assert not (await store.open("p1")).is_locked
