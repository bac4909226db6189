"""Shared FastAPI dependencies."""
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from taskflow.config import Settings
from taskflow.database import get_db
from taskflow.models import User
from taskflow.realtime import RoomBroadcaster
from taskflow.services.auth import resolve_token


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_broadcaster(request: Request) -> RoomBroadcaster:
    return request.app.state.broadcaster


def bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_current_user(
    token: Optional[str] = Depends(bearer_token),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> User:
    return resolve_token(db, token, settings)
