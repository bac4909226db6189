"""Task endpoints, nested under a board"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from taskflow.config import Settings
from taskflow.database import get_db
from taskflow.dependencies import get_broadcaster, get_current_user, get_settings
from taskflow.models import User
from taskflow.realtime import RoomBroadcaster
from taskflow.schemas import AssigneeCreate, MoveResult, TaskCreate, TaskMove, TaskPage, TaskResponse, TaskUpdate
from taskflow.services import tasks as tasks_service

router = APIRouter()


@router.get("", response_model=TaskPage)
async def search_tasks(
    board_id: int,
    search: str = Query(""),
    list_id: Optional[int] = Query(None),
    page: int = Query(1),
    limit: Optional[int] = Query(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return tasks_service.search_tasks(db, current_user, board_id, search, list_id, page, limit, settings)


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    board_id: int,
    task_in: TaskCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    broadcaster: RoomBroadcaster = Depends(get_broadcaster),
):
    task = tasks_service.create_task(db, current_user, board_id, task_in, settings)
    await broadcaster.publish(board_id, "task:created", {"task": task.model_dump(mode="json")})
    return task


@router.put("/move", response_model=MoveResult)
async def move_task(
    board_id: int,
    move_in: TaskMove,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    broadcaster: RoomBroadcaster = Depends(get_broadcaster),
):
    """Move a task within or across lists; no event is sent for a no-op."""
    result = tasks_service.move_task(db, current_user, board_id, move_in, settings)
    if result.moved:
        await broadcaster.publish(
            board_id,
            "task:moved",
            result.model_dump(mode="json", include={"task", "from_list_id", "to_list_id", "to_index", "lists"}),
        )
    return result


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    board_id: int,
    task_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return tasks_service.get_task(db, current_user, board_id, task_id)


@router.put("/{task_id}", response_model=TaskResponse)
async def update_task(
    board_id: int,
    task_id: int,
    task_update: TaskUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    broadcaster: RoomBroadcaster = Depends(get_broadcaster),
):
    task = tasks_service.update_task(db, current_user, board_id, task_id, task_update)
    await broadcaster.publish(board_id, "task:updated", {"task": task.model_dump(mode="json")})
    return task


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    board_id: int,
    task_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    broadcaster: RoomBroadcaster = Depends(get_broadcaster),
):
    task = tasks_service.delete_task(db, current_user, board_id, task_id)
    await broadcaster.publish(board_id, "task:deleted", {"task_id": task.id, "list_id": task.list_id})
    return None


@router.post("/{task_id}/assign", response_model=TaskResponse)
async def assign_user(
    board_id: int,
    task_id: int,
    assignee_in: AssigneeCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    broadcaster: RoomBroadcaster = Depends(get_broadcaster),
):
    task = tasks_service.assign_user(db, current_user, board_id, task_id, assignee_in.user_id)
    await broadcaster.publish(board_id, "task:updated", {"task": task.model_dump(mode="json")})
    return task


@router.delete("/{task_id}/assign/{user_id}", response_model=TaskResponse)
async def unassign_user(
    board_id: int,
    task_id: int,
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    broadcaster: RoomBroadcaster = Depends(get_broadcaster),
):
    task = tasks_service.unassign_user(db, current_user, board_id, task_id, user_id)
    await broadcaster.publish(board_id, "task:updated", {"task": task.model_dump(mode="json")})
    return task
