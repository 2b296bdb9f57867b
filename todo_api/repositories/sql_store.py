"""
SQL entity store - database operations for lists and nodes.
"""

from contextlib import asynccontextmanager, contextmanager
from typing import Any, AsyncIterator, Dict, Iterator, List, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from todo_api.core.hierarchy import EntityKind, ListScope, NodeScope, OwnerScope, Scope
from todo_api.errors import StoreFailureError
from todo_api.models import Node, TodoList
from todo_api.repositories.store import EntityStore, Row

_MODELS = {
    EntityKind.LIST: TodoList,
    EntityKind.NODE: Node,
}


def _scope_filter(scope: Scope):
    """Return (model, where-clause) selecting the members of a scope."""
    if isinstance(scope, OwnerScope):
        return TodoList, TodoList.owner_id == scope.owner_id
    if isinstance(scope, ListScope):
        return Node, Node.list_id == scope.list_id
    if isinstance(scope, NodeScope):
        return Node, Node.parent_node_id == scope.parent_node_id
    raise TypeError(f"unsupported scope: {scope!r}")


@contextmanager
def _store_errors(action: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        raise StoreFailureError(f"Store failure during {action}: {exc}") from exc


class SqlEntityStore(EntityStore):
    """Entity store backed by a SQLAlchemy AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        with _store_errors("transaction"):
            # A session that already did work is inside an implicit
            # transaction; nest a SAVEPOINT in that case.
            if self.db.in_transaction():
                async with self.db.begin_nested():
                    yield
            else:
                async with self.db.begin():
                    yield

    async def exists(self, kind: EntityKind, entity_id: int) -> bool:
        model = _MODELS[kind]
        with _store_errors(f"{kind.value} id lookup"):
            result = await self.db.execute(select(model.id).where(model.id == entity_id))
            return result.scalar_one_or_none() is not None

    async def get_list(self, list_id: int) -> Optional[TodoList]:
        with _store_errors("list lookup"):
            result = await self.db.execute(
                select(TodoList).where(TodoList.id == list_id).execution_options(populate_existing=True)
            )
            return result.scalar_one_or_none()

    async def get_node(self, node_id: int) -> Optional[Node]:
        with _store_errors("node lookup"):
            result = await self.db.execute(
                select(Node).where(Node.id == node_id).execution_options(populate_existing=True)
            )
            return result.scalar_one_or_none()

    async def add(self, row: Row) -> Row:
        with _store_errors("insert"):
            self.db.add(row)
            await self.db.flush()
        return row

    async def update(self, kind: EntityKind, entity_id: int, values: Dict[str, Any]) -> None:
        if not values:
            return
        model = _MODELS[kind]
        with _store_errors(f"{kind.value} update"):
            await self.db.execute(
                update(model).where(model.id == entity_id).values(**values)
            )

    async def delete(self, kind: EntityKind, entity_id: int) -> None:
        model = _MODELS[kind]
        with _store_errors(f"{kind.value} delete"):
            await self.db.execute(delete(model).where(model.id == entity_id))

    async def members(self, scope: Scope) -> List[Row]:
        model, condition = _scope_filter(scope)
        with _store_errors("scope listing"):
            result = await self.db.execute(
                select(model)
                .where(condition)
                .order_by(model.index.asc())
                .execution_options(populate_existing=True)
            )
            return list(result.scalars().all())

    async def max_index(self, scope: Scope) -> Optional[int]:
        model, condition = _scope_filter(scope)
        with _store_errors("max index query"):
            result = await self.db.execute(select(func.max(model.index)).where(condition))
            return result.scalar_one_or_none()

    async def lock_scope(self, scope: Scope) -> None:
        model, condition = _scope_filter(scope)
        with _store_errors("scope lock"):
            # An owner may have no rows yet; the advisory lock always exists
            if isinstance(scope, OwnerScope):
                await self.db.execute(select(func.pg_advisory_xact_lock(scope.owner_id)))
            # Lock the parent row too so inserts into an empty scope serialize
            elif isinstance(scope, ListScope):
                await self.db.execute(
                    select(TodoList.id).where(TodoList.id == scope.list_id).with_for_update()
                )
            elif isinstance(scope, NodeScope):
                await self.db.execute(
                    select(Node.id).where(Node.id == scope.parent_node_id).with_for_update()
                )
            await self.db.execute(select(model.id).where(condition).with_for_update())

    async def shift_indexes(
        self,
        scope: Scope,
        lower: int,
        upper: Optional[int],
        delta: int,
    ) -> int:
        model, condition = _scope_filter(scope)
        stmt = update(model).where(condition, model.index >= lower)
        if upper is not None:
            stmt = stmt.where(model.index <= upper)
        stmt = stmt.values(index=model.index + delta).execution_options(synchronize_session="fetch")
        with _store_errors("index shift"):
            result = await self.db.execute(stmt)
            return result.rowcount

    async def set_index(self, kind: EntityKind, entity_id: int, index: int) -> None:
        model = _MODELS[kind]
        with _store_errors(f"{kind.value} index update"):
            await self.db.execute(
                update(model).where(model.id == entity_id).values(index=index)
            )
