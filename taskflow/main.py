"""TaskFlow application factory."""
from contextlib import asynccontextmanager
from typing import Optional

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import sessionmaker
from starlette.exceptions import HTTPException as StarletteHTTPException

from taskflow.api.v1 import auth, boards, lists, realtime, tasks
from taskflow.config import Settings
from taskflow.config import settings as default_settings
from taskflow.database import Base, build_engine, make_session_factory
from taskflow.errors import InternalError, TaskFlowError, ValidationError
from taskflow.logging_config import configure_logging
from taskflow.realtime import PresenceTracker, RoomBroadcaster

logger = structlog.get_logger()

HTTP_ERROR_KINDS = {
    400: "validation_error",
    401: "authentication_error",
    403: "authorization_error",
    404: "not_found",
    405: "validation_error",
    409: "conflict",
}


def _error_body(kind: str, message: str) -> dict:
    return {"error": {"kind": kind, "message": message}}


def _describe_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts) or "Invalid request"


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(TaskFlowError)
    async def handle_taskflow_error(request: Request, exc: TaskFlowError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.to_dict()})

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        error = ValidationError(_describe_validation_errors(exc))
        return JSONResponse(status_code=error.status_code, content={"error": error.to_dict()})

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        kind = HTTP_ERROR_KINDS.get(exc.status_code, "internal_error")
        return JSONResponse(status_code=exc.status_code, content=_error_body(kind, str(exc.detail)))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error", path=request.url.path, method=request.method)
        error = InternalError()
        return JSONResponse(status_code=error.status_code, content={"error": error.to_dict()})


def create_app(settings: Optional[Settings] = None, session_factory: Optional[sessionmaker] = None) -> FastAPI:
    """Build an independent application instance.

    Each instance owns its session factory, presence tracker and room
    broadcaster; nothing is shared through module globals.
    """
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL)

    if session_factory is None:
        session_factory = make_session_factory(build_engine(settings.DATABASE_URL))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        Base.metadata.create_all(bind=session_factory.kw["bind"])
        app.state.broadcaster = RoomBroadcaster(session_factory, PresenceTracker())
        logger.info("TaskFlow started", version=settings.APP_VERSION)
        try:
            yield
        finally:
            await app.state.broadcaster.shutdown()
            logger.info("TaskFlow stopped")

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.session_factory = session_factory

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
    app.include_router(boards.router, prefix="/api/boards", tags=["boards"])
    app.include_router(lists.router, prefix="/api/boards/{board_id}/lists", tags=["lists"])
    app.include_router(tasks.router, prefix="/api/boards/{board_id}/tasks", tags=["tasks"])
    app.include_router(realtime.router, tags=["realtime"])

    @app.get("/health")
    async def health():
        return {"status": "ok", "app": settings.APP_NAME, "version": settings.APP_VERSION}

    return app


app = create_app()


def run() -> None:
    uvicorn.run(
        "taskflow.main:app",
        host=default_settings.HOST,
        port=default_settings.PORT,
        reload=default_settings.DEBUG,
    )


if __name__ == "__main__":
    run()
