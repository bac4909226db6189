"""Schemas for users and authentication"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class UserCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserSummary(BaseModel):
    id: int
    name: str
    email: str
    avatar: Optional[str] = None

    class Config:
        from_attributes = True


class UserResponse(UserSummary):
    created_at: datetime


class Token(BaseModel):
    token: str
    token_type: str = "bearer"
    user: UserSummary
