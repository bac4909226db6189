"""
Pydantic schemas for request/response validation
"""
from taskflow.schemas.user import UserCreate, UserLogin, UserResponse, UserSummary, Token
from taskflow.schemas.board_member import BoardMemberResponse, MemberCreate
from taskflow.schemas.board_list import BoardListCreate, BoardListResponse, BoardListUpdate, ListPosition, ListReorder
from taskflow.schemas.task import (
    AssigneeCreate,
    ListOrder,
    MoveResult,
    TaskCreate,
    TaskMove,
    TaskPage,
    TaskPosition,
    TaskResponse,
    TaskUpdate,
)
from taskflow.schemas.board import BoardCreate, BoardDetail, BoardResponse, BoardSummary, BoardUpdate
from taskflow.schemas.activity import ActivityPage, ActivityResponse, Pagination

__all__ = [
    "UserCreate",
    "UserLogin",
    "UserResponse",
    "UserSummary",
    "Token",
    "BoardMemberResponse",
    "MemberCreate",
    "BoardListCreate",
    "BoardListResponse",
    "BoardListUpdate",
    "ListPosition",
    "ListReorder",
    "AssigneeCreate",
    "ListOrder",
    "MoveResult",
    "TaskCreate",
    "TaskMove",
    "TaskPage",
    "TaskPosition",
    "TaskResponse",
    "TaskUpdate",
    "BoardCreate",
    "BoardDetail",
    "BoardResponse",
    "BoardSummary",
    "BoardUpdate",
    "ActivityPage",
    "ActivityResponse",
    "Pagination",
]
