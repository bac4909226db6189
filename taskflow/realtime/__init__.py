"""Board rooms: live subscribers, presence and event fanout."""
from taskflow.realtime.broadcaster import RoomBroadcaster
from taskflow.realtime.connection import WebSocketConnection
from taskflow.realtime.presence import PresenceEntry, PresenceTracker

__all__ = ["RoomBroadcaster", "WebSocketConnection", "PresenceEntry", "PresenceTracker"]
