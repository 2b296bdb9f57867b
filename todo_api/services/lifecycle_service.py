"""
Cascading deletion of lists, tasks and subtasks.
"""

import logging
from typing import Optional

from todo_api.core.hierarchy import EntityRef, OwnerScope, Scope
from todo_api.repositories.store import EntityStore
from todo_api.services.hierarchy_resolver import HierarchyResolver
from todo_api.services.position_manager import PositionManager

logger = logging.getLogger(__name__)


class LifecycleService:
    """
    Removes an entity together with everything it owns.

    Children go first, each one closing the gap it leaves in its own
    scope, then the target's siblings are compacted and the target row
    is removed. The whole cascade runs in a single transaction.
    """

    def __init__(
        self,
        store: EntityStore,
        positions: Optional[PositionManager] = None,
        resolver: Optional[HierarchyResolver] = None,
    ):
        self.store = store
        self.positions = positions or PositionManager(store)
        self.resolver = resolver or HierarchyResolver(store)

    async def delete(self, owner_id: int, ref: EntityRef, depth: Optional[int] = None) -> int:
        """
        Delete a list or node owned by owner_id.

        Returns:
            Number of rows removed, the target included

        Raises:
            NotFoundError: if the target is absent or foreign
            StoreFailureError: if the store rejects any step
        """
        async with self.store.transaction():
            placement = await self.resolver.resolve_for_update(owner_id, ref, depth=depth)
            removed = await self._remove(placement.ref, placement.scope, placement.index, placement.depth)

        logger.info(
            "Deleted %s %s for owner %s (%d rows)",
            ref.kind.value, ref.id, owner_id, removed,
        )
        return removed

    async def purge_owner(self, owner_id: int) -> int:
        """
        Delete every list of an owner, and all of their tasks.

        Returns:
            Number of lists removed
        """
        scope = OwnerScope(owner_id)
        async with self.store.transaction():
            await self.store.lock_scope(scope)
            lists = await self.store.members(scope)
            for todo_list in reversed(lists):
                await self._remove(todo_list.ref, scope, todo_list.index, 0)

        logger.info("Purged %d lists for owner %s", len(lists), owner_id)
        return len(lists)

    async def _remove(self, ref: EntityRef, scope: Scope, index: int, depth: int) -> int:
        removed = 0

        child_scope = self.resolver.child_scope(ref, depth)
        if child_scope is not None:
            await self.store.lock_scope(child_scope)
            # Highest index first, so no pending child has its index shifted
            children = await self.store.members(child_scope)
            for child in reversed(children):
                removed += await self._remove(child.ref, child_scope, child.index, depth + 1)

        await self.positions.close_gap(scope, index)
        await self.store.delete(ref.kind, ref.id)
        return removed + 1
