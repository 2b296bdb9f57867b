"""
Hierarchy vocabulary shared by the store and the services.

An owner has ordered lists, a list has ordered tasks and a task has
ordered subtasks. Tasks and subtasks are both stored as nodes; what tells
them apart is the parent a node hangs from.

Scopes name a group of siblings:
- OwnerScope: the lists of one user
- ListScope: the top-level tasks of one list
- NodeScope: the subtasks of one task
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


# Depth of a node below its list
ITEM_DEPTH = 1
SUBITEM_DEPTH = 2


class EntityKind(str, Enum):
    """Row family an identifier belongs to."""
    LIST = "list"
    NODE = "node"


@dataclass(frozen=True)
class EntityRef:
    """Identifier plus the family it lives in (lists and nodes have separate id spaces)."""
    kind: EntityKind
    id: int


@dataclass(frozen=True)
class OwnerScope:
    owner_id: int

    @property
    def kind(self) -> EntityKind:
        return EntityKind.LIST


@dataclass(frozen=True)
class ListScope:
    list_id: int

    @property
    def kind(self) -> EntityKind:
        return EntityKind.NODE


@dataclass(frozen=True)
class NodeScope:
    parent_node_id: int

    @property
    def kind(self) -> EntityKind:
        return EntityKind.NODE


Scope = Union[OwnerScope, ListScope, NodeScope]


@dataclass(frozen=True)
class ListParent:
    """Node is a top-level task of a list."""
    list_id: int

    @property
    def scope(self) -> ListScope:
        return ListScope(self.list_id)


@dataclass(frozen=True)
class ItemParent:
    """Node is a subtask of another node."""
    node_id: int

    @property
    def scope(self) -> NodeScope:
        return NodeScope(self.node_id)


NodeParent = Union[ListParent, ItemParent]


def parent_from_columns(list_id: Optional[int], parent_node_id: Optional[int]) -> NodeParent:
    """
    Build the parent variant from the two nullable row columns.

    Raises:
        ValueError: if neither or both columns are set
    """
    if list_id and not parent_node_id:
        return ListParent(list_id)
    if parent_node_id and not list_id:
        return ItemParent(parent_node_id)
    raise ValueError(
        f"node must have exactly one parent (list_id={list_id}, parent_node_id={parent_node_id})"
    )
