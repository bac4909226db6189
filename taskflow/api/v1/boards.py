"""Board, membership and activity endpoints"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from taskflow.config import Settings
from taskflow.database import get_db
from taskflow.dependencies import get_broadcaster, get_current_user, get_settings
from taskflow.models import User
from taskflow.realtime import RoomBroadcaster
from taskflow.schemas import (
    ActivityPage,
    BoardCreate,
    BoardDetail,
    BoardMemberResponse,
    BoardResponse,
    BoardSummary,
    BoardUpdate,
    MemberCreate,
)
from taskflow.services import activity as activity_service
from taskflow.services import boards as boards_service

router = APIRouter()


@router.get("", response_model=List[BoardSummary])
async def list_boards(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """List every board the caller belongs to, most recently updated first."""
    return boards_service.list_boards(db, current_user)


@router.post("", response_model=BoardResponse, status_code=status.HTTP_201_CREATED)
async def create_board(
    board_in: BoardCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return boards_service.create_board(db, current_user, board_in, settings)


@router.get("/{board_id}", response_model=BoardDetail)
async def get_board(
    board_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Return the board with its lists, tasks and members."""
    return boards_service.get_board(db, current_user, board_id)


@router.put("/{board_id}", response_model=BoardResponse)
async def update_board(
    board_id: int,
    board_update: BoardUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    broadcaster: RoomBroadcaster = Depends(get_broadcaster),
):
    board = boards_service.update_board(db, current_user, board_id, board_update, settings)
    await broadcaster.publish(board_id, "board:updated", {"board": board.model_dump(mode="json")})
    return board


@router.delete("/{board_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_board(
    board_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    broadcaster: RoomBroadcaster = Depends(get_broadcaster),
):
    boards_service.delete_board(db, current_user, board_id, settings)
    await broadcaster.publish(board_id, "board:deleted", {"board_id": board_id})
    return None


@router.get("/{board_id}/members", response_model=List[BoardMemberResponse])
async def list_members(
    board_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return boards_service.list_members(db, current_user, board_id)


@router.post("/{board_id}/members", response_model=BoardMemberResponse, status_code=status.HTTP_201_CREATED)
async def add_member(
    board_id: int,
    member_in: MemberCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    broadcaster: RoomBroadcaster = Depends(get_broadcaster),
):
    member = boards_service.add_member(db, current_user, board_id, member_in.email)
    await broadcaster.publish(board_id, "member:added", {"member": member.model_dump(mode="json")})
    return member


@router.get("/{board_id}/activity", response_model=ActivityPage)
async def list_activity(
    board_id: int,
    page: int = Query(1),
    page_size: Optional[int] = Query(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return activity_service.list_activity(db, current_user, board_id, page, page_size, settings)
