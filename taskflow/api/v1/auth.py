"""Signup, login and current-user endpoints"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from taskflow.config import Settings
from taskflow.database import get_db
from taskflow.dependencies import get_current_user, get_settings
from taskflow.models import User
from taskflow.schemas import Token, UserCreate, UserLogin, UserResponse
from taskflow.services import auth as auth_service

router = APIRouter()


@router.post("/signup", response_model=Token, status_code=status.HTTP_201_CREATED)
async def signup(
    user_in: UserCreate,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return auth_service.signup(db, user_in, settings)


@router.post("/login", response_model=Token)
async def login(
    credentials: UserLogin,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return auth_service.login(db, credentials, settings)


@router.get("/me", response_model=UserResponse)
async def me(current_user: User = Depends(get_current_user)):
    return UserResponse.model_validate(current_user)
