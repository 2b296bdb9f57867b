"""
In-memory entity store.

Keeps list and node rows in dictionaries. Used by the test-suite and for
running the API without PostgreSQL. Transactions are serialized with an
asyncio lock and rolled back by restoring a snapshot, so a failed or
cancelled operation leaves the data exactly as it was.
"""

import asyncio
import copy
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple

from sqlalchemy import inspect

from todo_api.core.hierarchy import EntityKind, ListScope, NodeScope, OwnerScope, Scope
from todo_api.errors import StoreFailureError
from todo_api.models import Node, TodoList
from todo_api.repositories.store import EntityStore, Row

logger = logging.getLogger(__name__)


def _clone(row: Row) -> Row:
    values = {
        attr.key: copy.copy(getattr(row, attr.key))
        for attr in inspect(type(row)).column_attrs
    }
    return type(row)(**values)


def _in_scope(row: Row, scope: Scope) -> bool:
    if isinstance(scope, OwnerScope):
        return row.owner_id == scope.owner_id
    if isinstance(scope, ListScope):
        return row.list_id == scope.list_id
    if isinstance(scope, NodeScope):
        return row.parent_node_id == scope.parent_node_id
    raise TypeError(f"unsupported scope: {scope!r}")


class MemoryEntityStore(EntityStore):
    """Entity store backed by process-local dictionaries."""

    def __init__(self):
        self._rows: Dict[EntityKind, Dict[int, Row]] = {
            EntityKind.LIST: {},
            EntityKind.NODE: {},
        }
        self._lock = asyncio.Lock()
        self._holder: Optional[asyncio.Task] = None
        logger.info("In-memory entity store initialized")

    def clear(self):
        """Drop all rows."""
        for table in self._rows.values():
            table.clear()

    # Transactions

    def _snapshot(self) -> Dict[EntityKind, Dict[int, Row]]:
        return {
            kind: {row_id: _clone(row) for row_id, row in table.items()}
            for kind, table in self._rows.items()
        }

    @asynccontextmanager
    async def _savepoint(self) -> AsyncIterator[None]:
        snapshot = self._snapshot()
        try:
            yield
        except BaseException:
            # Covers CancelledError as well as regular failures
            self._rows = snapshot
            raise

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        task = asyncio.current_task()
        if self._holder is not None and self._holder is task:
            async with self._savepoint():
                yield
            return

        async with self._lock:
            self._holder = task
            try:
                async with self._savepoint():
                    yield
            finally:
                self._holder = None

    # Reads

    async def exists(self, kind: EntityKind, entity_id: int) -> bool:
        return entity_id in self._rows[kind]

    async def get_list(self, list_id: int) -> Optional[TodoList]:
        return self._rows[EntityKind.LIST].get(list_id)

    async def get_node(self, node_id: int) -> Optional[Node]:
        return self._rows[EntityKind.NODE].get(node_id)

    def _table_for(self, scope: Scope) -> Dict[int, Row]:
        return self._rows[scope.kind]

    async def members(self, scope: Scope) -> List[Row]:
        rows = [row for row in self._table_for(scope).values() if _in_scope(row, scope)]
        return sorted(rows, key=lambda row: row.index)

    async def max_index(self, scope: Scope) -> Optional[int]:
        indexes = [row.index for row in self._table_for(scope).values() if _in_scope(row, scope)]
        return max(indexes) if indexes else None

    async def lock_scope(self, scope: Scope) -> None:
        # Transactions already hold the store-wide lock
        return None

    # Writes

    def _kind_of(self, row: Row) -> EntityKind:
        if isinstance(row, TodoList):
            return EntityKind.LIST
        if isinstance(row, Node):
            return EntityKind.NODE
        raise TypeError(f"unsupported row type: {type(row).__name__}")

    def _parent_key(self, row: Row) -> Tuple[EntityKind, Optional[int]]:
        if row.list_id is not None:
            return EntityKind.LIST, row.list_id
        return EntityKind.NODE, row.parent_node_id

    async def add(self, row: Row) -> Row:
        kind = self._kind_of(row)
        table = self._rows[kind]
        if row.id in table:
            raise StoreFailureError(f"Duplicate {kind.value} id {row.id}")
        if kind is EntityKind.NODE:
            # Same guarantees as the tasks table constraints
            if (row.list_id is None) == (row.parent_node_id is None):
                raise StoreFailureError(f"Node {row.id} must have exactly one parent")
            parent_kind, parent_id = self._parent_key(row)
            if parent_id not in self._rows[parent_kind]:
                raise StoreFailureError(
                    f"Node {row.id} references missing {parent_kind.value} {parent_id}"
                )
        table[row.id] = row
        return row

    async def update(self, kind: EntityKind, entity_id: int, values: Dict[str, Any]) -> None:
        row = self._rows[kind].get(entity_id)
        if row is None:
            return
        for field, value in values.items():
            setattr(row, field, value)

    async def delete(self, kind: EntityKind, entity_id: int) -> None:
        if kind is EntityKind.LIST:
            referencing = [n.id for n in self._rows[EntityKind.NODE].values() if n.list_id == entity_id]
        else:
            referencing = [n.id for n in self._rows[EntityKind.NODE].values() if n.parent_node_id == entity_id]
        if referencing:
            raise StoreFailureError(
                f"Cannot delete {kind.value} {entity_id}: still referenced by nodes {referencing}"
            )
        self._rows[kind].pop(entity_id, None)

    async def shift_indexes(
        self,
        scope: Scope,
        lower: int,
        upper: Optional[int],
        delta: int,
    ) -> int:
        touched = 0
        for row in self._table_for(scope).values():
            if not _in_scope(row, scope):
                continue
            if row.index < lower or (upper is not None and row.index > upper):
                continue
            row.index += delta
            touched += 1
        return touched

    async def set_index(self, kind: EntityKind, entity_id: int, index: int) -> None:
        row = self._rows[kind].get(entity_id)
        if row is not None:
            row.index = index
