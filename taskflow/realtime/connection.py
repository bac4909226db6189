"""Transport adapters for room subscribers."""
import uuid
from typing import Optional

from fastapi import WebSocket

from taskflow.models import User


class WebSocketConnection:
    """A room subscriber backed by a Starlette WebSocket.

    Frames are JSON objects ``{"event": <name>, "data": <payload>}``.
    """

    def __init__(self, websocket: WebSocket, user: User, token: Optional[str] = None):
        self.websocket = websocket
        self.connection_id = uuid.uuid4().hex
        self.user_id = user.id
        self.user_name = user.name
        self.token = token

    async def send(self, event: str, data: dict) -> None:
        await self.websocket.send_json({"event": event, "data": data})

    def __repr__(self) -> str:
        return f"<WebSocketConnection {self.connection_id} user={self.user_id}>"
