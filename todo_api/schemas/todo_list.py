"""
List Pydantic schemas.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from todo_api.schemas.base import OrmRead, check_name


class ListCreate(BaseModel):
    """Schema for creating a new list."""

    name: str
    comment: str = ""

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        return check_name(value)


class ListUpdate(BaseModel):
    """Schema for updating a list. All fields optional."""

    name: Optional[str] = None
    comment: Optional[str] = None
    index: Optional[int] = Field(default=None, ge=0)

    @field_validator("name")
    @classmethod
    def validate_optional_name(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return check_name(value)


class ListRead(OrmRead):
    """Schema for reading list data (API response)."""

    id: int
    owner_id: int
    name: str
    comment: str
    index: int
