"""
Position manager - keeps sibling indexes dense.

Every sibling scope (lists of a user, tasks of a list, subtasks of a task)
holds indexes 0..n-1 with no gaps or duplicates. New entities are appended,
moves shift the rows between the old and new position, and removals pull
everything behind the hole forward by one.
"""

import logging
from typing import Optional

from todo_api.core.hierarchy import Scope
from todo_api.errors import InvalidIndexError
from todo_api.repositories.store import EntityStore

logger = logging.getLogger(__name__)


class PositionManager:
    """Index arithmetic for any sibling scope."""

    def __init__(self, store: EntityStore):
        self.store = store

    async def next_index(self, scope: Scope) -> int:
        """Index for a new member appended at the end of the scope."""
        max_index = await self.store.max_index(scope)
        if max_index is None:
            return 0
        return max_index + 1

    async def validate_target(self, scope: Scope, target_index: int) -> int:
        """
        Check that target_index addresses an existing position.

        Returns:
            The current maximum index of the scope

        Raises:
            InvalidIndexError: if target_index is outside [0, max]
        """
        max_index: Optional[int] = await self.store.max_index(scope)
        if max_index is None or target_index < 0 or target_index > max_index:
            raise InvalidIndexError(
                "Incorrect index.",
                details={"index": target_index, "max_index": max_index},
            )
        return max_index

    async def move(
        self,
        scope: Scope,
        entity_id: int,
        current_index: int,
        target_index: int,
    ) -> None:
        """
        Move one member of a scope to target_index.

        Moving earlier pushes [target, current) back by one; moving later
        pulls (current, target] forward by one. The mover is written last.
        """
        async with self.store.transaction():
            await self.store.lock_scope(scope)
            await self.validate_target(scope, target_index)

            if target_index == current_index:
                return

            if target_index < current_index:
                shifted = await self.store.shift_indexes(scope, target_index, current_index - 1, 1)
            else:
                shifted = await self.store.shift_indexes(scope, current_index + 1, target_index, -1)

            await self.store.set_index(scope.kind, entity_id, target_index)

        logger.debug(
            "Moved %s %s in %s from %d to %d (%d siblings shifted)",
            scope.kind.value, entity_id, scope, current_index, target_index, shifted,
        )

    async def close_gap(self, scope: Scope, removed_index: int) -> int:
        """Pull every member after removed_index forward by one."""
        async with self.store.transaction():
            shifted = await self.store.shift_indexes(scope, removed_index + 1, None, -1)
        logger.debug("Closed gap at %d in %s (%d siblings shifted)", removed_index, scope, shifted)
        return shifted
