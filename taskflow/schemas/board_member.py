"""Schemas for board members"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr


class MemberCreate(BaseModel):
    email: EmailStr


class BoardMemberResponse(BaseModel):
    id: int
    name: str
    email: str
    avatar: Optional[str] = None
    role: str
    joined_at: datetime
