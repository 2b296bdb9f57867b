"""
Tests for TodoService business logic.
"""

import random
from datetime import datetime, timedelta, timezone

import pytest

from todo_api.core.hierarchy import (
    ITEM_DEPTH,
    SUBITEM_DEPTH,
    EntityKind,
    EntityRef,
    ListScope,
    NodeScope,
    OwnerScope,
)
from todo_api.errors import InvalidIndexError, NotFoundError
from todo_api.schemas import ListCreate, ListUpdate, NodeCreate, NodeUpdate
from todo_api.services.id_allocator import IdAllocator
from todo_api.services.todo_service import TodoService


def _future(days=3):
    moment = datetime.now(timezone.utc) + timedelta(days=days)
    return moment.strftime("%Y-%m-%d %H:%M")


async def _assert_dense(store, scope):
    indexes = sorted(row.index for row in await store.members(scope))
    assert indexes == list(range(len(indexes)))


@pytest.mark.unit
@pytest.mark.asyncio
async def test_create_appends_with_unique_ids(service, store, owner_id):
    lists = [await service.create_list(owner_id, ListCreate(name=f"L{i}")) for i in range(3)]

    assert [row.index for row in lists] == [0, 1, 2]
    assert len({row.id for row in lists}) == 3
    assert all(row.id != 0 for row in lists)
    assert all(row.owner_id == owner_id for row in lists)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_items_and_subitems_get_their_own_indexes(service, owner_id):
    todo_list = await service.create_list(owner_id, ListCreate(name="L"))
    first = await service.create_item(owner_id, todo_list.id, NodeCreate(name="first"))
    second = await service.create_item(owner_id, todo_list.id, NodeCreate(name="second", comment="c"))
    sub = await service.create_subitem(owner_id, first.id, NodeCreate(name="sub"))

    assert (first.index, second.index, sub.index) == (0, 1, 0)
    assert first.list_id == todo_list.id and first.parent_node_id is None
    assert sub.parent_node_id == first.id and sub.list_id is None
    assert second.comment == "c"
    assert sub.categories == [] and sub.due_time is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_create_uses_the_injected_allocator(store, owner_id):
    candidates = iter([500, 501])
    service = TodoService(store, allocator=IdAllocator(candidate_factory=lambda: next(candidates)))

    todo_list = await service.create_list(owner_id, ListCreate(name="L"))
    task = await service.create_item(owner_id, todo_list.id, NodeCreate(name="T"))

    # Lists and nodes do not share an id space
    assert todo_list.id == 500
    assert task.id == 501


@pytest.mark.unit
@pytest.mark.asyncio
async def test_create_in_foreign_or_missing_parent_is_not_found(service, owner_id, other_owner_id):
    todo_list = await service.create_list(owner_id, ListCreate(name="L"))
    task = await service.create_item(owner_id, todo_list.id, NodeCreate(name="T"))

    with pytest.raises(NotFoundError):
        await service.create_item(other_owner_id, todo_list.id, NodeCreate(name="x"))
    with pytest.raises(NotFoundError):
        await service.create_item(owner_id, 987654, NodeCreate(name="x"))
    with pytest.raises(NotFoundError):
        await service.create_subitem(other_owner_id, task.id, NodeCreate(name="x"))
    with pytest.raises(NotFoundError):
        await service.create_entity(owner_id, OwnerScope(other_owner_id), {"name": "x"})


@pytest.mark.unit
@pytest.mark.asyncio
async def test_subtasks_cannot_have_children(service, store, owner_id):
    todo_list = await service.create_list(owner_id, ListCreate(name="L"))
    task = await service.create_item(owner_id, todo_list.id, NodeCreate(name="T"))
    sub = await service.create_subitem(owner_id, task.id, NodeCreate(name="S"))

    with pytest.raises(NotFoundError) as exc_info:
        await service.create_subitem(owner_id, sub.id, NodeCreate(name="too deep"))

    assert exc_info.value.message == "This task not found."
    assert await store.members(NodeScope(sub.id)) == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_get_respects_owner_and_depth(service, owner_id, other_owner_id):
    todo_list = await service.create_list(owner_id, ListCreate(name="L"))
    task = await service.create_item(owner_id, todo_list.id, NodeCreate(name="T"))
    sub = await service.create_subitem(owner_id, task.id, NodeCreate(name="S"))

    assert (await service.get_list(owner_id, todo_list.id)).name == "L"
    assert (await service.get_node(owner_id, task.id, depth=ITEM_DEPTH)).name == "T"
    assert (await service.get_node(owner_id, sub.id, depth=SUBITEM_DEPTH)).name == "S"

    with pytest.raises(NotFoundError):
        await service.get_list(other_owner_id, todo_list.id)
    with pytest.raises(NotFoundError):
        await service.get_node(owner_id, sub.id, depth=ITEM_DEPTH)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_listing_is_ordered_by_index(service, owner_id, other_owner_id):
    todo_list = await service.create_list(owner_id, ListCreate(name="L"))
    for name in ["A", "B", "C"]:
        await service.create_item(owner_id, todo_list.id, NodeCreate(name=name))
    c = (await service.list_items(owner_id, todo_list.id))[2]
    await service.move_entity(owner_id, c.ref, 0)

    assert [row.name for row in await service.list_items(owner_id, todo_list.id)] == ["C", "A", "B"]
    assert [row.name for row in await service.list_lists(owner_id)] == ["L"]
    assert await service.list_lists(other_owner_id) == []
    with pytest.raises(NotFoundError):
        await service.list_items(other_owner_id, todo_list.id)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_list_subitems_only_for_tasks(service, owner_id):
    todo_list = await service.create_list(owner_id, ListCreate(name="L"))
    task = await service.create_item(owner_id, todo_list.id, NodeCreate(name="T"))
    sub = await service.create_subitem(owner_id, task.id, NodeCreate(name="S"))

    assert [row.id for row in await service.list_subitems(owner_id, task.id)] == [sub.id]
    with pytest.raises(NotFoundError):
        await service.list_subitems(owner_id, sub.id)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_update_node_fields_and_position(service, store, owner_id):
    todo_list = await service.create_list(owner_id, ListCreate(name="L"))
    a = await service.create_item(owner_id, todo_list.id, NodeCreate(name="A"))
    await service.create_item(owner_id, todo_list.id, NodeCreate(name="B"))
    await service.create_item(owner_id, todo_list.id, NodeCreate(name="C"))

    data = NodeUpdate(
        name="A2",
        categories=["work", " home ", "work"],
        due_time=_future(),
        done=True,
        index=2,
    )
    updated = await service.update_node(owner_id, a.id, data, depth=ITEM_DEPTH)

    assert updated.name == "A2"
    assert updated.categories == ["home", "work"]
    assert updated.done is True
    assert updated.due_time is not None
    assert updated.index == 2
    order = [row.name for row in await store.members(ListScope(todo_list.id))]
    assert order == ["B", "C", "A2"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_invalid_index_leaves_fields_untouched(service, store, owner_id):
    todo_list = await service.create_list(owner_id, ListCreate(name="L"))
    a = await service.create_item(owner_id, todo_list.id, NodeCreate(name="A"))
    await service.create_item(owner_id, todo_list.id, NodeCreate(name="B"))

    with pytest.raises(InvalidIndexError):
        await service.update_node(owner_id, a.id, NodeUpdate(name="renamed", index=5))

    node = await store.get_node(a.id)
    assert node.name == "A"
    assert node.index == 0


@pytest.mark.unit
@pytest.mark.asyncio
async def test_partial_update_keeps_other_fields(service, owner_id):
    todo_list = await service.create_list(owner_id, ListCreate(name="L", comment="keep me"))
    task = await service.create_item(owner_id, todo_list.id, NodeCreate(name="T", comment="note"))
    await service.update_node(owner_id, task.id, NodeUpdate(due_time=_future(), special=True))

    renamed = await service.update_list(owner_id, todo_list.id, ListUpdate(name="Renamed"))
    task = await service.update_node(owner_id, task.id, NodeUpdate(name="T2"))

    assert renamed.name == "Renamed" and renamed.comment == "keep me"
    assert task.name == "T2" and task.comment == "note"
    assert task.special is True
    assert task.due_time is not None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_due_time_can_be_cleared(service, owner_id):
    todo_list = await service.create_list(owner_id, ListCreate(name="L"))
    task = await service.create_item(owner_id, todo_list.id, NodeCreate(name="T"))
    await service.update_node(owner_id, task.id, NodeUpdate(due_time=_future()))

    cleared = await service.update_node(owner_id, task.id, NodeUpdate(due_time=None))

    assert cleared.due_time is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_update_list_position(service, store, owner_id):
    for name in ["A", "B", "C"]:
        await service.create_list(owner_id, ListCreate(name=name))
    c = (await service.list_lists(owner_id))[2]

    await service.update_list(owner_id, c.id, ListUpdate(index=0))

    assert [row.name for row in await store.members(OwnerScope(owner_id))] == ["C", "A", "B"]
    with pytest.raises(InvalidIndexError):
        await service.update_list(owner_id, c.id, ListUpdate(index=3))


@pytest.mark.unit
@pytest.mark.asyncio
async def test_move_of_subtask_by_task_depth_is_not_found(service, owner_id):
    todo_list = await service.create_list(owner_id, ListCreate(name="L"))
    task = await service.create_item(owner_id, todo_list.id, NodeCreate(name="T"))
    sub = await service.create_subitem(owner_id, task.id, NodeCreate(name="S"))

    with pytest.raises(NotFoundError):
        await service.move_entity(owner_id, EntityRef(EntityKind.NODE, sub.id), 0, depth=ITEM_DEPTH)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_random_operations_keep_indexes_dense(service, store, owner_id):
    rng = random.Random(1234)
    todo_list = await service.create_list(owner_id, ListCreate(name="L"))
    tasks = []

    for step in range(120):
        action = rng.choice(["create", "create", "sub", "move", "delete"])
        if action == "create" or not tasks:
            tasks.append(await service.create_item(owner_id, todo_list.id, NodeCreate(name=f"t{step}")))
        elif action == "sub":
            parent = rng.choice(tasks)
            await service.create_subitem(owner_id, parent.id, NodeCreate(name=f"s{step}"))
        elif action == "move":
            mover = rng.choice(tasks)
            target = rng.randrange(len(tasks))
            await service.move_entity(owner_id, mover.ref, target, depth=ITEM_DEPTH)
        else:
            victim = tasks.pop(rng.randrange(len(tasks)))
            await service.delete_item(owner_id, victim.id)

        await _assert_dense(store, ListScope(todo_list.id))
        for task in tasks:
            await _assert_dense(store, NodeScope(task.id))

    assert len(await store.members(ListScope(todo_list.id))) == len(tasks)
