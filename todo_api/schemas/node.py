"""
Task and subtask Pydantic schemas.

Tasks and subtasks share one row type, so they share schemas too.
"""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field, field_serializer, field_validator

from todo_api.core.config import settings
from todo_api.schemas.base import OrmRead, check_name


def parse_due_time(value):
    """
    Accept "YYYY-MM-DD HH:MM" strings or datetimes; reject past moments.

    Naive values are taken as UTC.
    """
    if value is None or value == "":
        return None
    if isinstance(value, str):
        try:
            value = datetime.strptime(value, settings.DUE_TIME_FORMAT)
        except ValueError:
            raise ValueError("Incorrect time format.")
    if not isinstance(value, datetime):
        raise ValueError("Incorrect time format.")
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    if value < datetime.now(timezone.utc):
        raise ValueError("Incorrect time.")
    return value


def normalize_categories(values: Optional[List[str]]) -> Optional[List[str]]:
    """Categories behave like a set: strip blanks, drop duplicates, sort."""
    if values is None:
        return None
    return sorted({value.strip() for value in values if value and value.strip()})


class NodeCreate(BaseModel):
    """Schema for creating a task or subtask."""

    name: str
    comment: str = ""

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        return check_name(value)


class NodeUpdate(BaseModel):
    """Schema for editing a task or subtask. All fields optional."""

    name: Optional[str] = None
    comment: Optional[str] = None
    categories: Optional[List[str]] = None
    due_time: Optional[datetime] = None
    done: Optional[bool] = None
    special: Optional[bool] = None
    index: Optional[int] = Field(default=None, ge=0)

    @field_validator("name")
    @classmethod
    def validate_optional_name(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return check_name(value)

    @field_validator("due_time", mode="before")
    @classmethod
    def validate_due_time(cls, value):
        return parse_due_time(value)

    @field_validator("categories")
    @classmethod
    def validate_categories(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        return normalize_categories(value)


class NodeRead(OrmRead):
    """Schema for reading task or subtask data (API response)."""

    id: int
    list_id: Optional[int] = None
    parent_node_id: Optional[int] = None
    name: str
    comment: str
    index: int
    categories: List[str] = Field(default_factory=list)
    due_time: Optional[datetime] = None
    done: bool = False
    special: bool = False

    @field_serializer("due_time")
    def serialize_due_time(self, value: Optional[datetime]) -> Optional[str]:
        if value is None:
            return None
        return value.strftime(settings.DUE_TIME_FORMAT)
