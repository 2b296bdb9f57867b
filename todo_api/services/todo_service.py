"""
Todo business logic service.

Entry point used by the routers: creates, edits, moves, deletes and lists
lists, tasks and subtasks on behalf of an authenticated owner.
"""

import logging
from typing import Any, Dict, List, Optional

from todo_api.core.hierarchy import (
    ITEM_DEPTH,
    SUBITEM_DEPTH,
    EntityKind,
    EntityRef,
    ListScope,
    NodeScope,
    OwnerScope,
    Scope,
)
from todo_api.models import Node, TodoList
from todo_api.repositories.store import EntityStore, Row
from todo_api.schemas.node import NodeCreate, NodeUpdate
from todo_api.schemas.todo_list import ListCreate, ListUpdate
from todo_api.services.hierarchy_resolver import HierarchyResolver, Placement
from todo_api.services.id_allocator import IdAllocator
from todo_api.services.lifecycle_service import LifecycleService
from todo_api.services.position_manager import PositionManager

logger = logging.getLogger(__name__)


class TodoService:
    """Service for list, task and subtask business logic."""

    def __init__(
        self,
        store: EntityStore,
        allocator: Optional[IdAllocator] = None,
        max_node_depth: Optional[int] = None,
    ):
        self.store = store
        self.allocator = allocator or IdAllocator()
        self.positions = PositionManager(store)
        self.resolver = HierarchyResolver(store, max_node_depth=max_node_depth)
        self.lifecycle = LifecycleService(store, self.positions, self.resolver)

    # Create

    async def create_entity(self, owner_id: int, scope: Scope, fields: Dict[str, Any]) -> Row:
        """
        Append a new list or node to scope.

        Allocates an id, takes the next free index and inserts the row in
        one transaction.
        """
        async with self.store.transaction():
            await self.resolver.authorize_scope(owner_id, scope)
            await self.store.lock_scope(scope)

            entity_id = await self.allocator.allocate(
                lambda candidate: self.store.exists(scope.kind, candidate)
            )
            index = await self.positions.next_index(scope)

            if isinstance(scope, OwnerScope):
                row = TodoList(id=entity_id, owner_id=scope.owner_id, index=index, **fields)
            else:
                parent = self.resolver.parent_variant(scope)
                row = Node.under(parent, id=entity_id, index=index, **fields)
            await self.store.add(row)

        logger.info("Created %s %s at index %d in %s", scope.kind.value, entity_id, index, scope)
        return row

    async def create_list(self, owner_id: int, data: ListCreate) -> TodoList:
        """Create a new list at the end of the owner's lists."""
        return await self.create_entity(owner_id, OwnerScope(owner_id), data.model_dump())

    async def create_item(self, owner_id: int, list_id: int, data: NodeCreate) -> Node:
        """Create a new task at the end of a list."""
        return await self.create_entity(owner_id, ListScope(list_id), data.model_dump())

    async def create_subitem(self, owner_id: int, item_id: int, data: NodeCreate) -> Node:
        """Create a new subtask at the end of a task."""
        return await self.create_entity(owner_id, NodeScope(item_id), data.model_dump())

    # Read

    async def get_list(self, owner_id: int, list_id: int) -> TodoList:
        placement = await self.resolver.resolve_list(owner_id, list_id)
        return placement.entity

    async def get_node(self, owner_id: int, node_id: int, depth: Optional[int] = None) -> Node:
        placement = await self.resolver.resolve_node(owner_id, node_id, depth=depth)
        return placement.entity

    async def list_siblings(self, owner_id: int, scope: Scope) -> List[Row]:
        """Members of a scope the owner may see, ascending by index."""
        async with self.store.transaction():
            await self.resolver.authorize_scope(owner_id, scope)
            return await self.store.members(scope)

    async def list_lists(self, owner_id: int) -> List[TodoList]:
        return await self.list_siblings(owner_id, OwnerScope(owner_id))

    async def list_items(self, owner_id: int, list_id: int) -> List[Node]:
        return await self.list_siblings(owner_id, ListScope(list_id))

    async def list_subitems(self, owner_id: int, item_id: int) -> List[Node]:
        await self.resolver.resolve_node(owner_id, item_id, depth=ITEM_DEPTH)
        return await self.list_siblings(owner_id, NodeScope(item_id))

    # Update

    async def move_entity(
        self,
        owner_id: int,
        ref: EntityRef,
        target_index: int,
        depth: Optional[int] = None,
    ) -> Row:
        """Move a list or node to target_index within its own scope."""
        async with self.store.transaction():
            placement = await self.resolver.resolve_for_update(owner_id, ref, depth=depth)
            await self.positions.move(placement.scope, ref.id, placement.index, target_index)
            moved = await self.store.get(ref.kind, ref.id)

        logger.info("Moved %s %s to index %d", ref.kind.value, ref.id, target_index)
        return moved

    async def update_list(self, owner_id: int, list_id: int, data: ListUpdate) -> TodoList:
        """Edit name/comment and, when given, the position of a list."""
        values = data.model_dump(exclude_unset=True)
        values = {key: value for key, value in values.items() if value is not None}
        async with self.store.transaction():
            ref = EntityRef(EntityKind.LIST, list_id)
            placement = await self.resolver.resolve_for_update(owner_id, ref)
            return await self._apply_update(placement, values)

    async def update_node(
        self,
        owner_id: int,
        node_id: int,
        data: NodeUpdate,
        depth: Optional[int] = None,
    ) -> Node:
        """Edit the fields and, when given, the position of a task or subtask."""
        values = data.model_dump(exclude_unset=True)
        # Only the due time may be cleared; other nulls mean "leave as is"
        values = {key: value for key, value in values.items() if value is not None or key == "due_time"}
        async with self.store.transaction():
            ref = EntityRef(EntityKind.NODE, node_id)
            placement = await self.resolver.resolve_for_update(owner_id, ref, depth=depth)
            return await self._apply_update(placement, values)

    async def _apply_update(self, placement: Placement, values: Dict[str, Any]) -> Row:
        ref = placement.ref
        target_index = values.pop("index", None)

        # Reject a bad index before any field is written
        if target_index is not None:
            await self.positions.validate_target(placement.scope, target_index)

        await self.store.update(ref.kind, ref.id, values)
        if target_index is not None and target_index != placement.index:
            await self.positions.move(placement.scope, ref.id, placement.index, target_index)

        logger.info("Updated %s %s (%s)", ref.kind.value, ref.id, ", ".join(sorted(values)) or "no fields")
        return await self.store.get(ref.kind, ref.id)

    # Delete

    async def delete_entity(self, owner_id: int, ref: EntityRef, depth: Optional[int] = None) -> int:
        """Delete a list or node and everything below it."""
        return await self.lifecycle.delete(owner_id, ref, depth=depth)

    async def delete_list(self, owner_id: int, list_id: int) -> int:
        return await self.delete_entity(owner_id, EntityRef(EntityKind.LIST, list_id))

    async def delete_item(self, owner_id: int, item_id: int) -> int:
        return await self.delete_entity(owner_id, EntityRef(EntityKind.NODE, item_id), depth=ITEM_DEPTH)

    async def delete_subitem(self, owner_id: int, subitem_id: int) -> int:
        return await self.delete_entity(owner_id, EntityRef(EntityKind.NODE, subitem_id), depth=SUBITEM_DEPTH)

    async def purge_owner(self, owner_id: int) -> int:
        """Delete all lists of an owner; returns how many were removed."""
        return await self.lifecycle.purge_owner(owner_id)
