"""Entity store implementations."""

from todo_api.repositories.store import EntityStore
from todo_api.repositories.sql_store import SqlEntityStore
from todo_api.repositories.memory_store import MemoryEntityStore

__all__ = [
    "EntityStore",
    "SqlEntityStore",
    "MemoryEntityStore",
]
