from datetime import timedelta
from typing import Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from taskflow.config import Settings
from taskflow.database import Base, build_engine, make_session_factory
from taskflow.main import create_app
from taskflow.models import User
from taskflow.security import create_access_token, hash_password

engine = build_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = make_session_factory(engine)


@pytest.fixture
def settings() -> Settings:
    return Settings(JWT_SECRET_KEY="test-secret-key-used-only-by-the-test-suite", LOG_LEVEL="WARNING", DEBUG=False)


@pytest.fixture(autouse=True)
def db_session() -> Session:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(settings: Settings):
    app = create_app(settings, TestingSessionLocal)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user(db_session: Session):
    def _make_user(name: str = "Alice", email: Optional[str] = None, password: str = "secret123") -> User:
        user = User(
            name=name,
            email=email or f"{name.lower()}@example.com",
            password_hash=hash_password(password),
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def token_for(settings: Settings):
    def _token_for(user: User, expires_delta: Optional[timedelta] = None) -> str:
        return create_access_token(user.id, settings, expires_delta)

    return _token_for


@pytest.fixture
def auth_headers(token_for):
    def _auth_headers(user: User) -> dict:
        return {"Authorization": f"Bearer {token_for(user)}"}

    return _auth_headers


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def session_factory():
    return TestingSessionLocal
