"""Schemas for tasks"""
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from taskflow.models.task import TaskPriority


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    list_id: int
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[date] = None


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[date] = None


class TaskMove(BaseModel):
    task_id: int
    from_list_id: int
    to_list_id: int
    to_index: int = Field(..., ge=0)


class AssigneeCreate(BaseModel):
    user_id: int


class TaskResponse(BaseModel):
    id: int
    title: str
    description: str
    list_id: int
    board_id: int
    position: int
    priority: TaskPriority
    due_date: Optional[date]
    created_by: int
    creator_name: Optional[str]
    assignee_ids: List[int] = Field(default_factory=list)
    assignee_names: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class TaskPage(BaseModel):
    tasks: List[TaskResponse]
    page: int
    limit: int


class TaskPosition(BaseModel):
    id: int
    position: int


class ListOrder(BaseModel):
    list_id: int
    tasks: List[TaskPosition]


class MoveResult(BaseModel):
    task: TaskResponse
    from_list_id: int
    to_list_id: int
    to_index: int
    moved: bool = True
    # Resulting positions of every list the move touched.
    lists: List[ListOrder] = Field(default_factory=list)
