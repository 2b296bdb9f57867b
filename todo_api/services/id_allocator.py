"""
Identifier allocation for new lists and nodes.
"""

import logging
import uuid
from typing import Awaitable, Callable, Optional

from todo_api.core.config import settings
from todo_api.errors import IdAllocationError

logger = logging.getLogger(__name__)

ExistsCheck = Callable[[int], Awaitable[bool]]


def random_candidate() -> int:
    """32 random bits taken from a fresh UUID4."""
    return uuid.uuid4().int & 0xFFFFFFFF


class IdAllocator:
    """
    Hands out random identifiers that are not yet used in the store.

    The candidate is not reserved; the primary key constraint is what
    finally guards against a concurrent insert of the same id.
    """

    def __init__(
        self,
        max_attempts: Optional[int] = None,
        candidate_factory: Callable[[], int] = random_candidate,
    ):
        self.max_attempts = max_attempts or settings.ID_ALLOCATION_MAX_ATTEMPTS
        self.candidate_factory = candidate_factory

    async def allocate(self, check_exists: ExistsCheck) -> int:
        """
        Draw candidates until check_exists reports one as free.

        Raises:
            IdAllocationError: if every attempt collided
        """
        for attempt in range(1, self.max_attempts + 1):
            candidate = self.candidate_factory()
            # Zero reads as "no parent" in the node columns
            if candidate == 0:
                continue
            if not await check_exists(candidate):
                return candidate
            logger.warning("Identifier collision on %s (attempt %d)", candidate, attempt)

        raise IdAllocationError(
            f"No free identifier after {self.max_attempts} attempts",
            details={"max_attempts": self.max_attempts},
        )
