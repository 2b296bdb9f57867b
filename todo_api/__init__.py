"""
todo-api core package.

Ordered todo lists, tasks and subtasks with dense sibling indexes.
"""

__version__ = "0.1.0"
