"""
Hierarchy resolver.

Answers the questions the other services need: where does an entity sit,
who owns it, and which scope holds its children. Writers use
resolve_for_update so the index they act on is read under the scope lock.
"""

from dataclasses import dataclass
from typing import Optional, Union

from todo_api.core.config import settings
from todo_api.core.hierarchy import (
    EntityKind,
    EntityRef,
    ItemParent,
    ListParent,
    ListScope,
    NodeParent,
    NodeScope,
    OwnerScope,
    Scope,
)
from todo_api.errors import NotFoundError, StoreFailureError
from todo_api.models import Node, TodoList
from todo_api.repositories.store import EntityStore


@dataclass
class Placement:
    """
    Where an entity lives.

    depth is 0 for a list, 1 for a task and 2 for a subtask.
    """
    entity: Union[TodoList, Node]
    scope: Scope
    depth: int
    todo_list: TodoList
    parent: Optional[NodeParent] = None

    @property
    def ref(self) -> EntityRef:
        return self.entity.ref

    @property
    def owner_id(self) -> int:
        return self.todo_list.owner_id

    @property
    def index(self) -> int:
        return self.entity.index


def _describe(depth: int) -> str:
    return {0: "list", 1: "task"}.get(depth, "subtask")


class HierarchyResolver:
    """Navigation over the list / task / subtask tree."""

    def __init__(self, store: EntityStore, max_node_depth: Optional[int] = None):
        self.store = store
        self.max_node_depth = max_node_depth or settings.MAX_NODE_DEPTH

    async def resolve_list(self, owner_id: int, list_id: int) -> Placement:
        """
        Load a list owned by owner_id.

        Raises:
            NotFoundError: if the list is absent or belongs to someone else
        """
        todo_list = await self.store.get_list(list_id)
        if todo_list is None or todo_list.owner_id != owner_id:
            raise NotFoundError("This list not found.", details={"list_id": list_id})
        return Placement(entity=todo_list, scope=todo_list.scope, depth=0, todo_list=todo_list)

    async def resolve_node(
        self,
        owner_id: int,
        node_id: int,
        depth: Optional[int] = None,
    ) -> Placement:
        """
        Load a node owned (through its list) by owner_id.

        When depth is given the node must sit at exactly that depth, so a
        subtask id is not accepted where a task is expected.

        Raises:
            NotFoundError: if the node is absent, foreign or at another depth
            StoreFailureError: if the parent chain is broken
        """
        label = _describe(depth) if depth else "task"
        node = await self.store.get_node(node_id)
        if node is None:
            raise NotFoundError(f"This {label} not found.", details={"id": node_id})

        parent = self._parent_of(node)
        current = node
        node_depth = 1
        # Walk up through parent tasks until the list is reached
        while isinstance(current.scope, NodeScope):
            ancestor = await self.store.get_node(current.parent_node_id)
            if ancestor is None:
                raise StoreFailureError(
                    f"Task {current.id} references missing parent task {current.parent_node_id}"
                )
            self._parent_of(ancestor)
            current = ancestor
            node_depth += 1
            if node_depth > self.max_node_depth:
                raise StoreFailureError(
                    f"Task {node_id} is nested deeper than {self.max_node_depth} levels"
                )

        todo_list = await self.store.get_list(current.list_id)
        if todo_list is None:
            raise StoreFailureError(f"Task {current.id} references missing list {current.list_id}")
        if todo_list.owner_id != owner_id:
            raise NotFoundError(f"This {label} not found.", details={"id": node_id})
        if depth is not None and node_depth != depth:
            raise NotFoundError(f"This {label} not found.", details={"id": node_id})

        return Placement(
            entity=node,
            scope=parent.scope,
            depth=node_depth,
            todo_list=todo_list,
            parent=parent,
        )

    async def resolve(self, owner_id: int, ref: EntityRef, depth: Optional[int] = None) -> Placement:
        if ref.kind is EntityKind.LIST:
            return await self.resolve_list(owner_id, ref.id)
        return await self.resolve_node(owner_id, ref.id, depth=depth)

    async def resolve_for_update(
        self,
        owner_id: int,
        ref: EntityRef,
        depth: Optional[int] = None,
    ) -> Placement:
        """
        Resolve an entity, lock its sibling scope, then resolve it again.

        The index of the returned placement is read while the scope lock is
        held, so concurrent moves and deletes in the same scope cannot make
        it stale. Must be called inside a store transaction.
        """
        placement = await self.resolve(owner_id, ref, depth=depth)
        await self.store.lock_scope(placement.scope)
        return await self.resolve(owner_id, ref, depth=depth)

    async def authorize_scope(self, owner_id: int, scope: Scope) -> int:
        """
        Check that owner_id may read and append to scope.

        Returns:
            The depth new members of the scope will have

        Raises:
            NotFoundError: if the scope's parent is absent, foreign, or
                already at the deepest level
        """
        if isinstance(scope, OwnerScope):
            if scope.owner_id != owner_id:
                raise NotFoundError("Inactive user.", details={"owner_id": scope.owner_id})
            return 0
        if isinstance(scope, ListScope):
            await self.resolve_list(owner_id, scope.list_id)
            return 1
        if isinstance(scope, NodeScope):
            placement = await self.resolve_node(owner_id, scope.parent_node_id)
            if self.child_scope(placement.ref, placement.depth) is None:
                raise NotFoundError(
                    "This task not found.", details={"id": scope.parent_node_id}
                )
            return placement.depth + 1
        raise TypeError(f"unsupported scope: {scope!r}")

    def child_scope(self, ref: EntityRef, depth: int) -> Optional[Scope]:
        """Scope holding the children of an entity, None at the deepest level."""
        if ref.kind is EntityKind.LIST:
            return ListScope(ref.id)
        if depth < self.max_node_depth:
            return NodeScope(ref.id)
        return None

    @staticmethod
    def parent_variant(scope: Scope) -> NodeParent:
        """Parent a new node appended to scope will point at."""
        if isinstance(scope, ListScope):
            return ListParent(scope.list_id)
        if isinstance(scope, NodeScope):
            return ItemParent(scope.parent_node_id)
        raise TypeError(f"scope {scope!r} does not hold nodes")

    @staticmethod
    def _parent_of(node: Node) -> NodeParent:
        try:
            return node.parent
        except ValueError as exc:
            raise StoreFailureError(f"Corrupt task row {node.id}: {exc}") from exc
