"""
Models package.

Import all models here so they are registered with SQLAlchemy.
This file also makes it easy to import models from one place.
"""

from todo_api.models.todo_list import TodoList
from todo_api.models.node import Node

# Export all models
__all__ = [
    "TodoList",
    "Node",
]
