"""
Node model.

One table holds both tasks and subtasks. A task hangs from a list
(list_id set), a subtask hangs from a task (parent_node_id set).
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import BigInteger, Boolean, CheckConstraint, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column

from todo_api.core.hierarchy import (
    EntityKind,
    EntityRef,
    ItemParent,
    ListParent,
    NodeParent,
    Scope,
    parent_from_columns,
)
from todo_api.db.base import Base


class Node(Base):
    """
    Tasks table - top-level tasks and their subtasks.

    Siblings under the same list (or the same parent task) share a
    dense 0..n-1 index range.
    """

    __tablename__ = "tasks"
    __table_args__ = (
        CheckConstraint(
            "(list_id IS NULL) <> (parent_node_id IS NULL)",
            name="ck_tasks_single_parent",
        ),
    )

    id: Mapped[int] = mapped_column(
        BigInteger,
        primary_key=True,
        autoincrement=False,
    )

    list_id: Mapped[Optional[int]] = mapped_column(
        BigInteger,
        ForeignKey("lists.id"),
        nullable=True,
        index=True,
    )

    parent_node_id: Mapped[Optional[int]] = mapped_column(
        BigInteger,
        ForeignKey("tasks.id"),
        nullable=True,
        index=True,
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    comment: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
    )

    index: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    categories: Mapped[List[str]] = mapped_column(
        ARRAY(Text),
        nullable=False,
        default=list,
    )

    due_time: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    done: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    special: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    @classmethod
    def under(cls, parent: NodeParent, **fields) -> "Node":
        """Build a node attached to the given parent, filling the matching column."""
        if isinstance(parent, ListParent):
            fields.update(list_id=parent.list_id, parent_node_id=None)
        elif isinstance(parent, ItemParent):
            fields.update(list_id=None, parent_node_id=parent.node_id)
        else:
            raise TypeError(f"unsupported node parent: {parent!r}")
        fields.setdefault("comment", "")
        fields.setdefault("categories", [])
        fields.setdefault("due_time", None)
        fields.setdefault("done", False)
        fields.setdefault("special", False)
        return cls(**fields)

    @property
    def ref(self) -> EntityRef:
        return EntityRef(EntityKind.NODE, self.id)

    @property
    def parent(self) -> NodeParent:
        """Parent variant; raises ValueError for a row with neither or both parents."""
        return parent_from_columns(self.list_id, self.parent_node_id)

    @property
    def scope(self) -> Scope:
        """Sibling scope this node belongs to."""
        return self.parent.scope

    def __repr__(self) -> str:
        return (
            f"<Node id={self.id} list_id={self.list_id} "
            f"parent_node_id={self.parent_node_id} index={self.index}>"
        )
