"""Per-board subscriber sets and event fanout."""
import asyncio
from typing import Dict, List, Optional, Protocol

import structlog
from sqlalchemy.orm import sessionmaker
from starlette.concurrency import run_in_threadpool

from taskflow.errors import AuthorizationError, TaskFlowError
from taskflow.realtime.presence import PresenceEntry, PresenceTracker
from taskflow.services.access import get_board_or_404, get_membership

logger = structlog.get_logger()


class Connection(Protocol):
    connection_id: str
    user_id: int
    user_name: str

    async def send(self, event: str, data: dict) -> None:
        ...


class RoomBroadcaster:
    """Owns the live subscribers of every board room in this process.

    One instance is created when the app starts and torn down when it stops.
    Events published to a room go out in the order ``publish`` was called,
    serialized by a per-room lock; a subscriber that cannot be reached is
    logged and skipped.
    """

    def __init__(self, session_factory: sessionmaker, presence: Optional[PresenceTracker] = None):
        self._session_factory = session_factory
        self.presence = presence if presence is not None else PresenceTracker()
        self._rooms: Dict[int, Dict[str, Connection]] = {}
        self._locks: Dict[int, asyncio.Lock] = {}

    def subscribers(self, board_id: int) -> List[Connection]:
        return list(self._rooms.get(board_id, {}).values())

    def is_subscribed(self, connection: Connection, board_id: int) -> bool:
        return connection.connection_id in self._rooms.get(board_id, {})

    def _room_lock(self, board_id: int) -> asyncio.Lock:
        return self._locks.setdefault(board_id, asyncio.Lock())

    def _check_access(self, board_id: int, user_id: int) -> None:
        db = self._session_factory()
        try:
            get_board_or_404(db, board_id)
            if get_membership(db, board_id, user_id) is None:
                raise AuthorizationError("Not a member of this board")
        finally:
            db.close()

    async def join(self, connection: Connection, board_id: int) -> bool:
        """Subscribe ``connection`` to a board room after a membership check.

        On success the rest of the room hears ``user:online`` and the joiner
        gets ``board:joined`` with everyone else currently present.
        """
        try:
            await run_in_threadpool(self._check_access, board_id, connection.user_id)
        except TaskFlowError as exc:
            logger.info(
                "Room join rejected",
                board_id=board_id,
                user_id=connection.user_id,
                connection_id=connection.connection_id,
                reason=exc.message,
            )
            await self._deliver(connection, "error", {**exc.to_dict(), "board_id": board_id})
            return False

        room = self._rooms.setdefault(board_id, {})
        rejoin = connection.connection_id in room
        room[connection.connection_id] = connection

        entry = PresenceEntry(connection.connection_id, connection.user_id, connection.user_name)
        others = self.presence.join(board_id, entry)
        if not rejoin:
            await self.publish(board_id, "user:online", entry.to_dict(), exclude=connection)

        await self._deliver(
            connection,
            "board:joined",
            {"board_id": board_id, "online_users": [present.to_dict() for present in others]},
        )
        logger.info(
            "Room joined",
            board_id=board_id,
            user_id=connection.user_id,
            connection_id=connection.connection_id,
        )
        return True

    async def leave(self, connection: Connection, board_id: int) -> bool:
        room = self._rooms.get(board_id)
        if not room or connection.connection_id not in room:
            return False

        del room[connection.connection_id]
        if not room:
            del self._rooms[board_id]
            self._locks.pop(board_id, None)

        entry = self.presence.leave(board_id, connection.connection_id)
        if entry is None:
            entry = PresenceEntry(connection.connection_id, connection.user_id, connection.user_name)
        await self.publish(board_id, "user:offline", entry.to_dict())

        logger.info(
            "Room left",
            board_id=board_id,
            user_id=connection.user_id,
            connection_id=connection.connection_id,
        )
        return True

    async def disconnect(self, connection: Connection) -> None:
        """Drop ``connection`` from every room it joined."""
        joined = [board_id for board_id, room in self._rooms.items() if connection.connection_id in room]
        for board_id in joined:
            await self.leave(connection, board_id)

    async def publish(
        self, board_id: int, event: str, data: dict, exclude: Optional[Connection] = None
    ) -> int:
        """Deliver an event to the room; returns how many subscribers received it."""
        if board_id not in self._rooms:
            return 0

        delivered = 0
        async with self._room_lock(board_id):
            for connection in self.subscribers(board_id):
                if exclude is not None and connection.connection_id == exclude.connection_id:
                    continue
                if await self._deliver(connection, event, data):
                    delivered += 1
        logger.debug("Event published", board_id=board_id, event_name=event, delivered=delivered)
        return delivered

    async def _deliver(self, connection: Connection, event: str, data: dict) -> bool:
        try:
            await connection.send(event, data)
        except Exception as exc:
            logger.warning(
                "Event delivery failed",
                event_name=event,
                connection_id=connection.connection_id,
                error=str(exc),
            )
            return False
        return True

    async def shutdown(self) -> None:
        logger.info("Room broadcaster shutting down", rooms=len(self._rooms))
        self._rooms.clear()
        self._locks.clear()
        self.presence.clear()
