import os
from typing import Optional

import structlog
from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

logger = structlog.get_logger()

# Default to a local SQLite database if no DATABASE_URL is provided or usable
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.abspath(os.path.join(BASE_DIR, ".."))
DEFAULT_DB_PATH = os.path.join(PROJECT_ROOT, "taskflow.db")


def _enable_sqlite_foreign_keys(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def _set_pragma(dbapi_connection, _connection_record) -> None:  # pragma: no cover - SQLAlchemy callback
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.close()


def build_engine(database_url: Optional[str] = None, **kwargs) -> Engine:
    """Create the SQLAlchemy engine, preferring the configured database URL."""
    if database_url:
        try:
            engine = create_engine(database_url, **kwargs)
            if engine.dialect.name == "sqlite":
                _enable_sqlite_foreign_keys(engine)
            # Ensure the target database is reachable; otherwise fall back to SQLite
            with engine.connect():
                pass
            return engine
        except ModuleNotFoundError as exc:
            # Some SQL drivers (e.g. psycopg2) might be missing in the execution environment.
            logger.warning("Database driver missing, falling back to SQLite", error=str(exc))
        except Exception as exc:
            logger.warning("Database unreachable, falling back to SQLite", error=str(exc))

    sqlite_url = f"sqlite:///{DEFAULT_DB_PATH}"
    engine = create_engine(sqlite_url, connect_args={"check_same_thread": False})
    _enable_sqlite_foreign_keys(engine)
    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Base class for the models
Base = declarative_base()


def get_db(request: Request):
    """Yield a session bound to the app instance serving the request."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
