"""
Tests for sibling index arithmetic.
"""

import asyncio

import pytest

from todo_api.core.hierarchy import EntityKind, ListParent, ListScope, OwnerScope
from todo_api.errors import InvalidIndexError, StoreFailureError
from todo_api.models import Node, TodoList
from todo_api.services.position_manager import PositionManager


async def _seed_lists(store, owner_id, names):
    for index, name in enumerate(names):
        await store.add(TodoList(id=100 + index, owner_id=owner_id, name=name, comment="", index=index))


async def _order(store, scope):
    return [row.name for row in await store.members(scope)]


async def _indexes(store, scope):
    return {row.name: row.index for row in await store.members(scope)}


@pytest.mark.unit
@pytest.mark.asyncio
async def test_next_index_on_empty_scope_is_zero(store):
    positions = PositionManager(store)
    assert await positions.next_index(OwnerScope(1)) == 0
    assert await positions.next_index(ListScope(5)) == 0


@pytest.mark.unit
@pytest.mark.asyncio
async def test_next_index_is_max_plus_one(store):
    await store.add(TodoList(id=1, owner_id=1, name="a", comment="", index=0))
    await store.add(TodoList(id=2, owner_id=1, name="b", comment="", index=4))
    positions = PositionManager(store)

    assert await positions.next_index(OwnerScope(1)) == 5
    # Calling again without inserting gives the same answer
    assert await positions.next_index(OwnerScope(1)) == 5


@pytest.mark.unit
@pytest.mark.asyncio
async def test_move_later_pulls_following_siblings_forward(store):
    await _seed_lists(store, 1, ["A", "B", "C", "D"])
    positions = PositionManager(store)

    await positions.move(OwnerScope(1), 101, 1, 3)

    assert await _indexes(store, OwnerScope(1)) == {"A": 0, "C": 1, "D": 2, "B": 3}


@pytest.mark.unit
@pytest.mark.asyncio
async def test_move_earlier_pushes_preceding_siblings_back(store):
    await _seed_lists(store, 1, ["A", "B", "C", "D"])
    positions = PositionManager(store)

    await positions.move(OwnerScope(1), 103, 3, 1)

    assert await _order(store, OwnerScope(1)) == ["A", "D", "B", "C"]
    assert await _indexes(store, OwnerScope(1)) == {"A": 0, "D": 1, "B": 2, "C": 3}


@pytest.mark.unit
@pytest.mark.asyncio
async def test_move_to_same_index_is_a_no_op(store):
    await _seed_lists(store, 1, ["A", "B", "C"])
    positions = PositionManager(store)

    await positions.move(OwnerScope(1), 101, 1, 1)

    assert await _indexes(store, OwnerScope(1)) == {"A": 0, "B": 1, "C": 2}


@pytest.mark.unit
@pytest.mark.asyncio
@pytest.mark.parametrize("target", [-1, 3, 10])
async def test_move_outside_scope_is_rejected(store, target):
    await _seed_lists(store, 1, ["A", "B", "C"])
    positions = PositionManager(store)

    with pytest.raises(InvalidIndexError) as exc_info:
        await positions.move(OwnerScope(1), 100, 0, target)

    assert exc_info.value.details == {"index": target, "max_index": 2}
    assert await _indexes(store, OwnerScope(1)) == {"A": 0, "B": 1, "C": 2}


@pytest.mark.unit
@pytest.mark.asyncio
async def test_move_there_and_back_restores_every_index(store):
    names = ["A", "B", "C", "D", "E"]
    await _seed_lists(store, 1, names)
    positions = PositionManager(store)
    original = await _indexes(store, OwnerScope(1))

    for a in range(len(names)):
        for b in range(len(names)):
            mover = next(row for row in await store.members(OwnerScope(1)) if row.index == a)
            await positions.move(OwnerScope(1), mover.id, a, b)
            await positions.move(OwnerScope(1), mover.id, b, a)
            assert await _indexes(store, OwnerScope(1)) == original


@pytest.mark.unit
@pytest.mark.asyncio
async def test_move_only_touches_its_own_scope(store):
    await _seed_lists(store, 1, ["A", "B", "C"])
    await store.add(TodoList(id=900, owner_id=2, name="X", comment="", index=0))
    await store.add(TodoList(id=901, owner_id=2, name="Y", comment="", index=1))
    positions = PositionManager(store)

    await positions.move(OwnerScope(1), 100, 0, 2)

    assert await _indexes(store, OwnerScope(2)) == {"X": 0, "Y": 1}


@pytest.mark.unit
@pytest.mark.asyncio
async def test_close_gap_decrements_everything_after_the_hole(store):
    await store.add(TodoList(id=1, owner_id=1, name="L", comment="", index=0))
    for index, name in enumerate(["A", "B", "C", "D"]):
        await store.add(Node.under(ListParent(1), id=10 + index, name=name, index=index))
    positions = PositionManager(store)

    await store.delete(EntityKind.NODE, 11)
    shifted = await positions.close_gap(ListScope(1), 1)

    assert shifted == 2
    assert await _indexes(store, ListScope(1)) == {"A": 0, "C": 1, "D": 2}


@pytest.mark.unit
@pytest.mark.asyncio
async def test_failed_move_leaves_scope_untouched(store, monkeypatch):
    await _seed_lists(store, 1, ["A", "B", "C", "D"])
    positions = PositionManager(store)

    async def broken_set_index(kind, entity_id, index):
        raise StoreFailureError("disk full")

    monkeypatch.setattr(store, "set_index", broken_set_index)

    with pytest.raises(StoreFailureError):
        await positions.move(OwnerScope(1), 100, 0, 3)

    # Sibling shifts done before the failure were rolled back
    assert await _indexes(store, OwnerScope(1)) == {"A": 0, "B": 1, "C": 2, "D": 3}


@pytest.mark.unit
@pytest.mark.asyncio
async def test_cancelled_move_leaves_scope_untouched(store, monkeypatch):
    await _seed_lists(store, 1, ["A", "B", "C"])
    positions = PositionManager(store)
    reached = asyncio.Event()
    original_set_index = store.set_index

    async def slow_set_index(kind, entity_id, index):
        reached.set()
        await asyncio.sleep(30)
        await original_set_index(kind, entity_id, index)

    monkeypatch.setattr(store, "set_index", slow_set_index)

    pending = asyncio.create_task(positions.move(OwnerScope(1), 100, 0, 2))
    await reached.wait()
    pending.cancel()
    with pytest.raises(asyncio.CancelledError):
        await pending

    assert await _indexes(store, OwnerScope(1)) == {"A": 0, "B": 1, "C": 2}
    assert not store._lock.locked()
