"""List endpoints, nested under a board"""
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from taskflow.config import Settings
from taskflow.database import get_db
from taskflow.dependencies import get_broadcaster, get_current_user, get_settings
from taskflow.models import User
from taskflow.realtime import RoomBroadcaster
from taskflow.schemas import BoardListCreate, BoardListResponse, BoardListUpdate, ListReorder
from taskflow.services import lists as lists_service

router = APIRouter()


@router.post("", response_model=BoardListResponse, status_code=status.HTTP_201_CREATED)
async def create_list(
    board_id: int,
    list_in: BoardListCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    broadcaster: RoomBroadcaster = Depends(get_broadcaster),
):
    board_list = lists_service.create_list(db, current_user, board_id, list_in, settings)
    await broadcaster.publish(board_id, "list:created", {"list": board_list.model_dump(mode="json")})
    return board_list


# Registered before "/{list_id}" so "reorder" is not parsed as an id.
@router.put("/reorder", response_model=List[BoardListResponse])
async def reorder_lists(
    board_id: int,
    reorder_in: ListReorder,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    broadcaster: RoomBroadcaster = Depends(get_broadcaster),
):
    """Apply client-computed positions to the board's lists."""
    lists = lists_service.reorder_lists(db, current_user, board_id, reorder_in.lists, settings)
    await broadcaster.publish(
        board_id,
        "lists:reordered",
        {"lists": [board_list.model_dump(mode="json") for board_list in lists]},
    )
    return lists


@router.put("/{list_id}", response_model=BoardListResponse)
async def update_list(
    board_id: int,
    list_id: int,
    list_update: BoardListUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    broadcaster: RoomBroadcaster = Depends(get_broadcaster),
):
    board_list = lists_service.update_list(db, current_user, board_id, list_id, list_update, settings)
    await broadcaster.publish(board_id, "list:updated", {"list": board_list.model_dump(mode="json")})
    return board_list


@router.delete("/{list_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_list(
    board_id: int,
    list_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    broadcaster: RoomBroadcaster = Depends(get_broadcaster),
):
    lists_service.delete_list(db, current_user, board_id, list_id, settings)
    await broadcaster.publish(board_id, "list:deleted", {"list_id": list_id})
    return None
