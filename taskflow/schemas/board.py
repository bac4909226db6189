"""Schemas for boards"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from taskflow.schemas.board_list import BoardListResponse
from taskflow.schemas.board_member import BoardMemberResponse
from taskflow.schemas.task import TaskResponse

COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


class BoardCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field("", max_length=500)
    color: Optional[str] = Field(None, pattern=COLOR_PATTERN)


class BoardUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    color: Optional[str] = Field(None, pattern=COLOR_PATTERN)


class BoardResponse(BaseModel):
    id: int
    title: str
    description: str
    color: str
    owner_id: int
    created_at: datetime
    updated_at: datetime
    my_role: Optional[str] = None

    class Config:
        from_attributes = True


class BoardSummary(BoardResponse):
    owner_name: str
    list_count: int
    task_count: int


class BoardDetail(BaseModel):
    board: BoardResponse
    lists: List[BoardListResponse]
    tasks: List[TaskResponse]
    members: List[BoardMemberResponse]
