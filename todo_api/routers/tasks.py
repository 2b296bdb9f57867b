"""
Task router - API endpoints for tasks and their subtasks.
"""

from typing import List

from fastapi import APIRouter, Depends, status

from todo_api.core.dependencies import get_owner_id, get_todo_service
from todo_api.core.hierarchy import ITEM_DEPTH, EntityKind, EntityRef
from todo_api.schemas import DeleteResult, NodeCreate, NodeRead, NodeUpdate, PositionUpdate
from todo_api.services.todo_service import TodoService

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("/{task_id}", response_model=NodeRead)
async def get_task(
    task_id: int,
    owner_id: int = Depends(get_owner_id),
    service: TodoService = Depends(get_todo_service),
):
    """Get a task by ID."""
    return await service.get_node(owner_id, task_id, depth=ITEM_DEPTH)


@router.put("/{task_id}", response_model=NodeRead)
async def update_task(
    task_id: int,
    data: NodeUpdate,
    owner_id: int = Depends(get_owner_id),
    service: TodoService = Depends(get_todo_service),
):
    """
    Edit a task.

    Fields left out are not touched. A changed index moves the task
    among the other tasks of its list.
    """
    return await service.update_node(owner_id, task_id, data, depth=ITEM_DEPTH)


@router.put("/{task_id}/position", response_model=NodeRead)
async def move_task(
    task_id: int,
    data: PositionUpdate,
    owner_id: int = Depends(get_owner_id),
    service: TodoService = Depends(get_todo_service),
):
    """Move a task to another index within its list."""
    ref = EntityRef(EntityKind.NODE, task_id)
    return await service.move_entity(owner_id, ref, data.index, depth=ITEM_DEPTH)


@router.delete("/{task_id}", response_model=DeleteResult)
async def delete_task(
    task_id: int,
    owner_id: int = Depends(get_owner_id),
    service: TodoService = Depends(get_todo_service),
):
    """Delete a task and its subtasks."""
    deleted = await service.delete_item(owner_id, task_id)
    return DeleteResult(deleted=deleted)


@router.get("/{task_id}/subtasks", response_model=List[NodeRead])
async def list_subtasks(
    task_id: int,
    owner_id: int = Depends(get_owner_id),
    service: TodoService = Depends(get_todo_service),
):
    """Show all subtasks of the task, ordered by index."""
    return await service.list_subitems(owner_id, task_id)


@router.post("/{task_id}/subtasks", response_model=NodeRead, status_code=status.HTTP_201_CREATED)
async def create_subtask(
    task_id: int,
    data: NodeCreate,
    owner_id: int = Depends(get_owner_id),
    service: TodoService = Depends(get_todo_service),
):
    """Create a new subtask at the end of the task."""
    return await service.create_subitem(owner_id, task_id, data)
