from taskflow.realtime.presence import PresenceEntry, PresenceTracker


def _entry(connection_id, user_id=1, name="Alice"):
    return PresenceEntry(connection_id=connection_id, user_id=user_id, user_name=name)


def test_join_returns_others_already_present():
    tracker = PresenceTracker()
    assert tracker.join(1, _entry("a")) == []

    others = tracker.join(1, _entry("b", 2, "Bob"))

    assert [entry.connection_id for entry in others] == ["a"]
    assert [entry.connection_id for entry in tracker.viewers(1)] == ["a", "b"]


def test_same_user_on_two_connections_is_tracked_twice():
    tracker = PresenceTracker()
    tracker.join(1, _entry("a"))
    others = tracker.join(1, _entry("b"))

    assert others == [_entry("a")]
    assert len(tracker.viewers(1)) == 2


def test_rejoining_same_connection_excludes_itself():
    tracker = PresenceTracker()
    tracker.join(1, _entry("a"))
    tracker.join(1, _entry("b", 2, "Bob"))

    others = tracker.join(1, _entry("a"))

    assert [entry.connection_id for entry in others] == ["b"]
    assert len(tracker.viewers(1)) == 2


def test_leave_removes_entry_and_empty_rooms():
    tracker = PresenceTracker()
    tracker.join(1, _entry("a"))

    assert tracker.leave(1, "a") == _entry("a")
    assert tracker.leave(1, "a") is None
    assert tracker.viewers(1) == []
    assert tracker.rooms_for("a") == []


def test_rooms_for_and_clear():
    tracker = PresenceTracker()
    tracker.join(1, _entry("a"))
    tracker.join(2, _entry("a"))
    tracker.join(2, _entry("b", 2, "Bob"))

    assert sorted(tracker.rooms_for("a")) == [1, 2]
    assert tracker.is_present(2, "b")

    tracker.clear()
    assert tracker.viewers(2) == []


def test_entry_wire_shape():
    assert _entry("a", 3, "Carol").to_dict() == {"user_id": 3, "user_name": "Carol"}
