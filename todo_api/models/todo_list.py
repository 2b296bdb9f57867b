"""
TodoList model.

Represents an ordered list owned by a user.
"""

from sqlalchemy import BigInteger, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from todo_api.core.hierarchy import EntityKind, EntityRef, OwnerScope
from todo_api.db.base import Base


class TodoList(Base):
    """
    Lists table - one row per user list.

    Lists of the same owner share a dense 0..n-1 index range.
    """

    __tablename__ = "lists"

    # Random 32-bit id handed out by the id allocator, never autoincremented
    id: Mapped[int] = mapped_column(
        BigInteger,
        primary_key=True,
        autoincrement=False,
    )

    # Owner (user) id, resolved upstream by the identity layer
    owner_id: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
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

    @property
    def ref(self) -> EntityRef:
        return EntityRef(EntityKind.LIST, self.id)

    @property
    def scope(self) -> OwnerScope:
        """Sibling scope this list belongs to."""
        return OwnerScope(self.owner_id)

    def __repr__(self) -> str:
        return f"<TodoList id={self.id} owner_id={self.owner_id} index={self.index}>"
