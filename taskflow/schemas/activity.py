"""Schemas for the board activity log"""
from datetime import datetime
from typing import Any, Dict, List

from pydantic import BaseModel, Field

from taskflow.models.activity import ActivityAction, EntityType


class ActivityResponse(BaseModel):
    id: int
    board_id: int
    user_id: int
    user_name: str
    action: ActivityAction
    entity_type: EntityType
    entity_id: int
    entity_title: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime


class Pagination(BaseModel):
    page: int
    page_size: int
    total: int


class ActivityPage(BaseModel):
    activities: List[ActivityResponse]
    pagination: Pagination
