"""
Base Pydantic schemas and shared field rules.
"""

from pydantic import BaseModel, ConfigDict, Field

from todo_api.core.config import settings


def check_name(value: str) -> str:
    """Names must be present and at most NAME_MAX_LENGTH characters."""
    if value is None or value == "":
        raise ValueError("Empty name.")
    if len(value) > settings.NAME_MAX_LENGTH:
        raise ValueError(f"A name longer than {settings.NAME_MAX_LENGTH} characters.")
    return value


class OrmRead(BaseModel):
    """
    Base schema for reading rows.

    This tells Pydantic to work with SQLAlchemy models.
    """

    model_config = ConfigDict(from_attributes=True)


class PositionUpdate(BaseModel):
    """Schema for moving an entity within its siblings."""

    index: int = Field(ge=0)


class DeleteResult(BaseModel):
    """Schema returned by delete endpoints."""

    deleted: int
