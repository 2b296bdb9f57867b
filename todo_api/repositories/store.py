"""
Entity store interface.

The position manager, hierarchy resolver and lifecycle service only talk
to storage through this narrow interface. Two implementations exist:
SqlEntityStore (PostgreSQL through an AsyncSession) and MemoryEntityStore
(process-local dictionaries, used by tests and local tooling).
"""

from abc import ABC, abstractmethod
from typing import Any, AsyncContextManager, Dict, List, Optional, Union

from todo_api.core.hierarchy import EntityKind, Scope
from todo_api.models import Node, TodoList

Row = Union[TodoList, Node]


class EntityStore(ABC):
    """Transactional CRUD over list and node rows."""

    @abstractmethod
    def transaction(self) -> AsyncContextManager[None]:
        """
        Open a unit of work.

        Everything done inside the block commits together or not at all.
        Nested blocks behave like savepoints of the outer one.
        """

    @abstractmethod
    async def exists(self, kind: EntityKind, entity_id: int) -> bool:
        """Whether an identifier is already taken in the given family."""

    @abstractmethod
    async def get_list(self, list_id: int) -> Optional[TodoList]:
        """Load one list row."""

    @abstractmethod
    async def get_node(self, node_id: int) -> Optional[Node]:
        """Load one node row."""

    @abstractmethod
    async def add(self, row: Row) -> Row:
        """Insert a new list or node row."""

    @abstractmethod
    async def update(self, kind: EntityKind, entity_id: int, values: Dict[str, Any]) -> None:
        """Overwrite non-positional fields of a row."""

    @abstractmethod
    async def delete(self, kind: EntityKind, entity_id: int) -> None:
        """Remove a row. Children must already be gone."""

    @abstractmethod
    async def members(self, scope: Scope) -> List[Row]:
        """All rows of a sibling scope, ascending by index."""

    @abstractmethod
    async def max_index(self, scope: Scope) -> Optional[int]:
        """Highest index in the scope, None when the scope is empty."""

    @abstractmethod
    async def lock_scope(self, scope: Scope) -> None:
        """Block concurrent writers on the scope until the transaction ends."""

    @abstractmethod
    async def shift_indexes(
        self,
        scope: Scope,
        lower: int,
        upper: Optional[int],
        delta: int,
    ) -> int:
        """
        Add delta to the index of every member with lower <= index <= upper.

        An upper bound of None means no upper bound. Returns the number of
        rows touched.
        """

    @abstractmethod
    async def set_index(self, kind: EntityKind, entity_id: int, index: int) -> None:
        """Write the index of a single row."""

    async def get(self, kind: EntityKind, entity_id: int) -> Optional[Row]:
        if kind is EntityKind.LIST:
            return await self.get_list(entity_id)
        return await self.get_node(entity_id)
