"""Who is currently viewing which board.

Presence is tracked per connection, not per user: a user with two sessions
on one board appears twice and each session's departure is reported on its
own. Nothing here is persisted; a restart starts from empty rooms.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional


@dataclass(frozen=True)
class PresenceEntry:
    connection_id: str
    user_id: int
    user_name: str

    def to_dict(self) -> dict:
        return {"user_id": self.user_id, "user_name": self.user_name}


class PresenceTracker:
    def __init__(self) -> None:
        self._rooms: Dict[int, Dict[str, PresenceEntry]] = {}

    def join(self, board_id: int, entry: PresenceEntry) -> List[PresenceEntry]:
        """Add ``entry`` to the room and return everyone else already present."""
        room = self._rooms.setdefault(board_id, {})
        others = [present for connection_id, present in room.items() if connection_id != entry.connection_id]
        room[entry.connection_id] = entry
        return others

    def leave(self, board_id: int, connection_id: str) -> Optional[PresenceEntry]:
        room = self._rooms.get(board_id)
        if not room:
            return None
        entry = room.pop(connection_id, None)
        if not room:
            del self._rooms[board_id]
        return entry

    def is_present(self, board_id: int, connection_id: str) -> bool:
        return connection_id in self._rooms.get(board_id, {})

    def viewers(self, board_id: int) -> List[PresenceEntry]:
        return list(self._rooms.get(board_id, {}).values())

    def rooms_for(self, connection_id: str) -> List[int]:
        return [board_id for board_id, room in self._rooms.items() if connection_id in room]

    def clear(self) -> None:
        self._rooms.clear()
