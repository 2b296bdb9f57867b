"""
List router - API endpoints for lists and the tasks inside them.
"""

from typing import List

from fastapi import APIRouter, Depends, status

from todo_api.core.dependencies import get_owner_id, get_todo_service
from todo_api.core.hierarchy import EntityKind, EntityRef
from todo_api.schemas import (
    DeleteResult,
    ListCreate,
    ListRead,
    ListUpdate,
    NodeCreate,
    NodeRead,
    PositionUpdate,
)
from todo_api.services.todo_service import TodoService

router = APIRouter(prefix="/lists", tags=["lists"])


@router.get("", response_model=List[ListRead])
async def list_lists(
    owner_id: int = Depends(get_owner_id),
    service: TodoService = Depends(get_todo_service),
):
    """Show all lists of the user, ordered by index."""
    return await service.list_lists(owner_id)


@router.post("", response_model=ListRead, status_code=status.HTTP_201_CREATED)
async def create_list(
    data: ListCreate,
    owner_id: int = Depends(get_owner_id),
    service: TodoService = Depends(get_todo_service),
):
    """Create a new list at the end of the user's lists."""
    return await service.create_list(owner_id, data)


@router.delete("", response_model=DeleteResult)
async def purge_lists(
    owner_id: int = Depends(get_owner_id),
    service: TodoService = Depends(get_todo_service),
):
    """Delete every list of the user, with all tasks and subtasks."""
    deleted = await service.purge_owner(owner_id)
    return DeleteResult(deleted=deleted)


@router.get("/{list_id}", response_model=ListRead)
async def get_list(
    list_id: int,
    owner_id: int = Depends(get_owner_id),
    service: TodoService = Depends(get_todo_service),
):
    """Get a list by ID."""
    return await service.get_list(owner_id, list_id)


@router.put("/{list_id}", response_model=ListRead)
async def update_list(
    list_id: int,
    data: ListUpdate,
    owner_id: int = Depends(get_owner_id),
    service: TodoService = Depends(get_todo_service),
):
    """Edit a list; a changed index moves it among the user's lists."""
    return await service.update_list(owner_id, list_id, data)


@router.put("/{list_id}/position", response_model=ListRead)
async def move_list(
    list_id: int,
    data: PositionUpdate,
    owner_id: int = Depends(get_owner_id),
    service: TodoService = Depends(get_todo_service),
):
    """Move a list to another index."""
    return await service.move_entity(owner_id, EntityRef(EntityKind.LIST, list_id), data.index)


@router.delete("/{list_id}", response_model=DeleteResult)
async def delete_list(
    list_id: int,
    owner_id: int = Depends(get_owner_id),
    service: TodoService = Depends(get_todo_service),
):
    """Delete a list with all of its tasks and subtasks."""
    deleted = await service.delete_list(owner_id, list_id)
    return DeleteResult(deleted=deleted)


@router.get("/{list_id}/tasks", response_model=List[NodeRead])
async def list_tasks(
    list_id: int,
    owner_id: int = Depends(get_owner_id),
    service: TodoService = Depends(get_todo_service),
):
    """Show all tasks in the list, ordered by index."""
    return await service.list_items(owner_id, list_id)


@router.post("/{list_id}/tasks", response_model=NodeRead, status_code=status.HTTP_201_CREATED)
async def create_task(
    list_id: int,
    data: NodeCreate,
    owner_id: int = Depends(get_owner_id),
    service: TodoService = Depends(get_todo_service),
):
    """Create a new task at the end of the list."""
    return await service.create_item(owner_id, list_id, data)
