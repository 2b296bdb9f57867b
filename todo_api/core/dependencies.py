"""
FastAPI dependencies for the application.
"""

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from todo_api.core.config import settings
from todo_api.db.session import get_db
from todo_api.repositories.sql_store import SqlEntityStore
from todo_api.repositories.store import EntityStore
from todo_api.services.todo_service import TodoService


async def get_owner_id(request: Request) -> int:
    """
    Extract the authenticated user id from the owner header.

    Token checks happen in front of this service; the id is trusted.
    Raises 400 if the header is missing or not an integer.
    """
    raw = request.headers.get(settings.OWNER_HEADER)
    if not raw:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{settings.OWNER_HEADER} header is required",
        )
    try:
        return int(raw)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{settings.OWNER_HEADER} header must be an integer",
        )


async def get_store(db: AsyncSession = Depends(get_db)) -> EntityStore:
    """Dependency to get the entity store for the request."""
    return SqlEntityStore(db)


async def get_todo_service(store: EntityStore = Depends(get_store)) -> TodoService:
    """Dependency to get the todo service bound to the request's store."""
    return TodoService(store)
