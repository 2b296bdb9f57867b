"""
Subtask router - API endpoints for a single subtask.
"""

from fastapi import APIRouter, Depends

from todo_api.core.dependencies import get_owner_id, get_todo_service
from todo_api.core.hierarchy import SUBITEM_DEPTH, EntityKind, EntityRef
from todo_api.schemas import DeleteResult, NodeRead, NodeUpdate, PositionUpdate
from todo_api.services.todo_service import TodoService

router = APIRouter(prefix="/subtasks", tags=["subtasks"])


@router.get("/{subtask_id}", response_model=NodeRead)
async def get_subtask(
    subtask_id: int,
    owner_id: int = Depends(get_owner_id),
    service: TodoService = Depends(get_todo_service),
):
    """Get a subtask by ID."""
    return await service.get_node(owner_id, subtask_id, depth=SUBITEM_DEPTH)


@router.put("/{subtask_id}", response_model=NodeRead)
async def update_subtask(
    subtask_id: int,
    data: NodeUpdate,
    owner_id: int = Depends(get_owner_id),
    service: TodoService = Depends(get_todo_service),
):
    """Edit a subtask; a changed index moves it among its siblings."""
    return await service.update_node(owner_id, subtask_id, data, depth=SUBITEM_DEPTH)


@router.put("/{subtask_id}/position", response_model=NodeRead)
async def move_subtask(
    subtask_id: int,
    data: PositionUpdate,
    owner_id: int = Depends(get_owner_id),
    service: TodoService = Depends(get_todo_service),
):
    """Move a subtask to another index within its task."""
    ref = EntityRef(EntityKind.NODE, subtask_id)
    return await service.move_entity(owner_id, ref, data.index, depth=SUBITEM_DEPTH)


@router.delete("/{subtask_id}", response_model=DeleteResult)
async def delete_subtask(
    subtask_id: int,
    owner_id: int = Depends(get_owner_id),
    service: TodoService = Depends(get_todo_service),
):
    """Delete a subtask."""
    deleted = await service.delete_subitem(owner_id, subtask_id)
    return DeleteResult(deleted=deleted)
