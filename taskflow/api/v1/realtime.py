"""WebSocket endpoint for board rooms.

Clients send JSON frames ``{"event": <name>, "data": {...}}``:

* ``join:board`` / ``leave:board`` with ``board_id``
* ``task:viewing`` with ``board_id`` and ``task_id``
* ``ping``

Server events use the same frame shape.
"""
import json
from typing import Any, Awaitable, Callable, Dict, Optional

import structlog
from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect, status
from starlette.concurrency import run_in_threadpool

from taskflow.config import Settings
from taskflow.errors import AuthenticationError, TaskFlowError, ValidationError
from taskflow.models import User
from taskflow.realtime import RoomBroadcaster, WebSocketConnection
from taskflow.security import decode_access_token
from taskflow.services.auth import resolve_token

logger = structlog.get_logger()

router = APIRouter()

Handler = Callable[[WebSocketConnection, RoomBroadcaster, Settings, Dict[str, Any]], Awaitable[None]]


def _authenticate(session_factory, token: Optional[str], settings: Settings) -> User:
    db = session_factory()
    try:
        user = resolve_token(db, token, settings)
        db.expunge(user)
        return user
    finally:
        db.close()


def _board_id(data: Dict[str, Any]) -> int:
    board_id = data.get("board_id")
    if not isinstance(board_id, int) or isinstance(board_id, bool):
        raise ValidationError("board_id must be an integer")
    return board_id


async def _join_board(connection, broadcaster, settings, data) -> None:
    board_id = _board_id(data)
    # Tokens can expire while the socket stays open.
    decode_access_token(connection.token, settings)
    await broadcaster.join(connection, board_id)


async def _leave_board(connection, broadcaster, settings, data) -> None:
    await broadcaster.leave(connection, _board_id(data))


async def _task_viewing(connection, broadcaster, settings, data) -> None:
    board_id = _board_id(data)
    if not broadcaster.is_subscribed(connection, board_id):
        return
    await broadcaster.publish(
        board_id,
        "task:viewing",
        {"user_id": connection.user_id, "user_name": connection.user_name, "task_id": data.get("task_id")},
        exclude=connection,
    )


async def _ping(connection, broadcaster, settings, data) -> None:
    await connection.send("pong", {})


HANDLERS: Dict[str, Handler] = {
    "join:board": _join_board,
    "leave:board": _leave_board,
    "task:viewing": _task_viewing,
    "ping": _ping,
}


async def _handle_frame(
    connection: WebSocketConnection, broadcaster: RoomBroadcaster, settings: Settings, raw: str
) -> None:
    try:
        message = json.loads(raw)
    except json.JSONDecodeError:
        message = None
    if not isinstance(message, dict):
        await connection.send("error", ValidationError("Malformed message").to_dict())
        return

    event = message.get("event")
    data = message.get("data") or {}
    handler = HANDLERS.get(event) if isinstance(event, str) else None
    if handler is None:
        await connection.send("error", ValidationError(f"Unknown event: {event}").to_dict())
        return
    if not isinstance(data, dict):
        await connection.send("error", ValidationError("Event data must be an object").to_dict())
        return

    try:
        await handler(connection, broadcaster, settings, data)
    except TaskFlowError as exc:
        await connection.send("error", exc.to_dict())


@router.websocket("/ws")
async def board_socket(websocket: WebSocket, token: Optional[str] = Query(None)):
    app = websocket.app
    settings: Settings = app.state.settings
    broadcaster: RoomBroadcaster = app.state.broadcaster

    try:
        user = await run_in_threadpool(_authenticate, app.state.session_factory, token, settings)
    except AuthenticationError as exc:
        logger.info("WebSocket handshake rejected", reason=exc.message)
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    connection = WebSocketConnection(websocket, user, token)
    logger.info("WebSocket connected", user_id=user.id, connection_id=connection.connection_id)

    try:
        while True:
            raw = await websocket.receive_text()
            await _handle_frame(connection, broadcaster, settings, raw)
    except WebSocketDisconnect:
        pass
    finally:
        await broadcaster.disconnect(connection)
        logger.info("WebSocket disconnected", user_id=user.id, connection_id=connection.connection_id)
