"""Account creation, login and bearer-token resolution."""
from typing import Optional

import structlog
from sqlalchemy.orm import Session

from taskflow.config import settings as default_settings
from taskflow.errors import AuthenticationError, ConflictError
from taskflow.models import User
from taskflow.schemas import Token, UserCreate, UserLogin, UserSummary
from taskflow.security import create_access_token, decode_access_token, hash_password, token_user_id, verify_password

logger = structlog.get_logger()


def _issue_token(user: User, settings) -> Token:
    return Token(
        token=create_access_token(user.id, settings),
        user=UserSummary.model_validate(user),
    )


def signup(db: Session, user_in: UserCreate, settings=default_settings) -> Token:
    email = user_in.email.lower()
    if db.query(User).filter(User.email == email).first():
        raise ConflictError("Email already in use")

    user = User(
        name=user_in.name.strip(),
        email=email,
        password_hash=hash_password(user_in.password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info("User signed up", user_id=user.id)
    return _issue_token(user, settings)


def login(db: Session, credentials: UserLogin, settings=default_settings) -> Token:
    user = db.query(User).filter(User.email == credentials.email.lower()).first()
    if not user or not verify_password(credentials.password, user.password_hash):
        raise AuthenticationError("Invalid email or password")
    return _issue_token(user, settings)


def resolve_token(db: Session, token: Optional[str], settings=default_settings) -> User:
    """Return the user a bearer token identifies."""
    if not token:
        raise AuthenticationError("No token provided")

    claims = decode_access_token(token, settings)
    user = db.get(User, token_user_id(claims))
    if not user:
        raise AuthenticationError("User not found")
    return user
