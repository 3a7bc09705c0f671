"""Concurrency tests: per-uuid serialization, cross-uuid parallelism."""

import asyncio
import threading

import pytest

from mcbackpack.application.backpack_store import BackpackStore
from mcbackpack.domain.exceptions import DuplicateEntityError
from mcbackpack.domain.model.backpack import BackpackData
from tests.fakes import FakeBackpackRepository


@pytest.mark.asyncio
async def test_concurrent_saves_on_one_backpack_never_overlap():
    repo = FakeBackpackRepository([BackpackData.new("p1", "tex", 54)], delay=0.005)
    store = BackpackStore(repo)
    payloads = [f"payload-{i}-" + "X" * i for i in range(20)]

    await asyncio.gather(*(store.save("p1", p) for p in payloads))

    assert repo.max_active_per_uuid["p1"] == 1
    final = await store.open("p1")
    assert final.content in payloads
    # The last write to reach storage is what is stored.
    assert final.content == repo.save_log[-1].content


@pytest.mark.asyncio
async def test_mixed_mutations_on_one_backpack_all_apply():
    repo = FakeBackpackRepository([BackpackData.new("p1", "tex", 9)], delay=0.002)
    store = BackpackStore(repo)

    await asyncio.gather(
        store.set_pwd("p1", "h1"),
        store.save("p1", "AAAA"),
        store.set_texture("p1", "tex-b"),
    )

    b = await store.open("p1")
    # Read-modify-write under the lock means no update is lost.
    assert (b.pwd_hash, b.content, b.texture) == ("h1", "AAAA", "tex-b")


@pytest.mark.asyncio
async def test_concurrent_delete_pwd_succeeds_exactly_once():
    repo = FakeBackpackRepository(
        [BackpackData.new("p1", "tex", 9).with_password("h1")], delay=0.002
    )
    store = BackpackStore(repo)

    results = await asyncio.gather(*(store.delete_pwd("p1", "h1") for _ in range(8)))

    assert results.count(True) == 1
    assert results.count(False) == 7
    assert not (await store.open("p1")).is_locked


@pytest.mark.asyncio
async def test_concurrent_create_with_same_uuid_only_one_wins():
    repo = FakeBackpackRepository(delay=0.002)
    store = BackpackStore(repo)

    results = await asyncio.gather(
        *(store.create("p1", f"tex-{i}", 9) for i in range(5)),
        return_exceptions=True,
    )

    assert results.count(None) == 1
    assert sum(isinstance(r, DuplicateEntityError) for r in results) == 4
    assert len(repo.save_log) == 1


@pytest.mark.asyncio
async def test_different_backpacks_reach_storage_in_parallel():
    repo = FakeBackpackRepository(
        [BackpackData.new("a", "tex", 9), BackpackData.new("b", "tex", 9)]
    )
    # Both reads must be inside the repository at the same time to pass
    # the barrier; a store-wide lock would make this time out.
    repo.barrier = threading.Barrier(2)
    store = BackpackStore(repo)

    a, b = await asyncio.gather(store.open("a"), store.open("b"))

    assert (a.uuid, b.uuid) == ("a", "b")


@pytest.mark.asyncio
async def test_lock_table_is_empty_after_work():
    repo = FakeBackpackRepository([BackpackData.new("p1", "tex", 9)])
    store = BackpackStore(repo)

    await asyncio.gather(*(store.save("p1", str(i)) for i in range(5)))

    assert len(store._locks) == 0


@pytest.mark.asyncio
async def test_cancelled_save_holds_lock_until_its_write_lands():
    repo = FakeBackpackRepository([BackpackData.new("p1", "tex-a", 9)])
    repo.save_gate = threading.Event()
    store = BackpackStore(repo)

    save_task = asyncio.create_task(store.save("p1", "AAAA"))
    assert await asyncio.to_thread(repo.save_entered.wait, 5)
    save_task.cancel()

    texture_task = asyncio.create_task(store.set_texture("p1", "tex-b"))
    await asyncio.sleep(0.05)
    # The write from the cancelled save is still running in its thread.
    assert not save_task.done()
    assert not texture_task.done()

    repo.save_gate.set()
    await texture_task
    with pytest.raises(asyncio.CancelledError):
        await save_task

    b = await store.open("p1")
    assert (b.texture, b.content) == ("tex-b", "AAAA")
    assert repo.max_active_per_uuid["p1"] == 1
    assert [s.texture for s in repo.save_log] == ["tex-a", "tex-b"]
