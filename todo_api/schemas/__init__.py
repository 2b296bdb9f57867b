"""
Schemas package.

Pydantic models for request validation and API responses.
"""

from todo_api.schemas.base import DeleteResult, PositionUpdate
from todo_api.schemas.todo_list import ListCreate, ListRead, ListUpdate
from todo_api.schemas.node import NodeCreate, NodeRead, NodeUpdate

__all__ = [
    "DeleteResult",
    "PositionUpdate",
    "ListCreate",
    "ListRead",
    "ListUpdate",
    "NodeCreate",
    "NodeRead",
    "NodeUpdate",
]
