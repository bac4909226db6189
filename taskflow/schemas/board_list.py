"""Schemas for board lists"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class BoardListCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)


class BoardListUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)


class ListPosition(BaseModel):
    id: int
    position: int


class ListReorder(BaseModel):
    lists: List[ListPosition]


class BoardListResponse(BaseModel):
    id: int
    title: str
    board_id: int
    position: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
