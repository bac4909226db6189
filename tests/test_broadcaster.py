import pytest

from taskflow.realtime import PresenceTracker, RoomBroadcaster

from tests.factories import add_member, create_board
from tests.fakes import FakeConnection

pytestmark = pytest.mark.anyio


@pytest.fixture
def broadcaster(session_factory):
    return RoomBroadcaster(session_factory, PresenceTracker())


@pytest.fixture
def room(db_session, make_user):
    alice = make_user("Alice")
    bob = make_user("Bob")
    board = create_board(db_session, alice)
    add_member(db_session, alice, board.id, bob)
    return alice, bob, board


async def test_join_acknowledges_and_announces(broadcaster, room):
    alice, bob, board = room
    alice_conn = FakeConnection(alice)
    bob_conn = FakeConnection(bob)

    assert await broadcaster.join(alice_conn, board.id)
    assert alice_conn.last("board:joined") == {"board_id": board.id, "online_users": []}

    assert await broadcaster.join(bob_conn, board.id)
    assert bob_conn.last("board:joined")["online_users"] == [{"user_id": alice.id, "user_name": "Alice"}]
    assert alice_conn.last("user:online") == {"user_id": bob.id, "user_name": "Bob"}
    assert "user:online" not in bob_conn.events()


async def test_join_rejects_non_member(broadcaster, room, make_user):
    _, _, board = room
    mallory_conn = FakeConnection(make_user("Mallory"))

    assert not await broadcaster.join(mallory_conn, board.id)

    assert mallory_conn.events() == ["error"]
    assert mallory_conn.last("error")["kind"] == "authorization_error"
    assert not broadcaster.is_subscribed(mallory_conn, board.id)


async def test_join_unknown_board_is_not_found(broadcaster, room):
    alice, _, _ = room
    conn = FakeConnection(alice)

    assert not await broadcaster.join(conn, 404)
    assert conn.last("error")["kind"] == "not_found"


async def test_rejoin_does_not_announce_twice(broadcaster, room):
    alice, bob, board = room
    alice_conn = FakeConnection(alice)
    bob_conn = FakeConnection(bob)
    await broadcaster.join(alice_conn, board.id)
    await broadcaster.join(bob_conn, board.id)

    await broadcaster.join(bob_conn, board.id)

    assert alice_conn.events().count("user:online") == 1
    assert bob_conn.events().count("board:joined") == 2
    assert len(broadcaster.subscribers(board.id)) == 2


async def test_publish_reaches_every_subscriber_in_order(broadcaster, room):
    alice, bob, board = room
    alice_conn = FakeConnection(alice)
    bob_conn = FakeConnection(bob)
    await broadcaster.join(alice_conn, board.id)
    await broadcaster.join(bob_conn, board.id)

    for index in range(3):
        await broadcaster.publish(board.id, "task:created", {"index": index})

    for conn in (alice_conn, bob_conn):
        received = [data["index"] for event, data in conn.sent if event == "task:created"]
        assert received == [0, 1, 2]


async def test_publish_survives_a_broken_subscriber(broadcaster, room):
    alice, bob, board = room
    alice_conn = FakeConnection(alice)
    broken = FakeConnection(bob)
    await broadcaster.join(alice_conn, board.id)
    await broadcaster.join(broken, board.id)
    broken.fail = True

    delivered = await broadcaster.publish(board.id, "list:created", {"list": {"id": 1}})

    assert delivered == 1
    assert alice_conn.last("list:created") == {"list": {"id": 1}}


async def test_publish_can_exclude_sender(broadcaster, room):
    alice, bob, board = room
    alice_conn = FakeConnection(alice)
    bob_conn = FakeConnection(bob)
    await broadcaster.join(alice_conn, board.id)
    await broadcaster.join(bob_conn, board.id)

    await broadcaster.publish(board.id, "task:viewing", {"task_id": 1}, exclude=alice_conn)

    assert "task:viewing" not in alice_conn.events()
    assert bob_conn.last("task:viewing") == {"task_id": 1}


async def test_disconnect_leaves_every_room(broadcaster, room, db_session):
    alice, bob, board = room
    second = create_board(db_session, alice, "Second")
    add_member(db_session, alice, second.id, bob)
    alice_conn = FakeConnection(alice)
    bob_conn = FakeConnection(bob)
    for board_id in (board.id, second.id):
        await broadcaster.join(alice_conn, board_id)
        await broadcaster.join(bob_conn, board_id)

    await broadcaster.disconnect(bob_conn)

    assert alice_conn.events().count("user:offline") == 2
    assert broadcaster.presence.rooms_for(bob_conn.connection_id) == []
    assert not broadcaster.is_subscribed(bob_conn, board.id)


async def test_leave_when_not_subscribed_is_silent(broadcaster, room):
    alice, _, board = room
    conn = FakeConnection(alice)

    assert not await broadcaster.leave(conn, board.id)
    assert conn.sent == []


async def test_two_connections_of_one_user_are_separate(broadcaster, room):
    alice, bob, board = room
    bob_conn = FakeConnection(bob)
    first = FakeConnection(alice)
    second = FakeConnection(alice)
    await broadcaster.join(bob_conn, board.id)
    await broadcaster.join(first, board.id)
    await broadcaster.join(second, board.id)

    await broadcaster.leave(first, board.id)

    assert bob_conn.events().count("user:online") == 2
    assert bob_conn.events().count("user:offline") == 1
    assert len(broadcaster.presence.viewers(board.id)) == 2


async def test_shutdown_clears_rooms(broadcaster, room):
    alice, _, board = room
    conn = FakeConnection(alice)
    await broadcaster.join(conn, board.id)

    await broadcaster.shutdown()

    assert broadcaster.subscribers(board.id) == []
    assert broadcaster.presence.viewers(board.id) == []


async def test_publish_to_empty_room_keeps_no_state(broadcaster, room):
    for board_id in range(1000, 1100):
        assert await broadcaster.publish(board_id, "task:created", {"task": {"id": board_id}}) == 0

    assert broadcaster._locks == {}


async def test_last_leave_drops_room_lock(broadcaster, room):
    alice, bob, board = room
    alice_conn = FakeConnection(alice)
    bob_conn = FakeConnection(bob)
    await broadcaster.join(alice_conn, board.id)
    await broadcaster.join(bob_conn, board.id)
    assert board.id in broadcaster._locks

    await broadcaster.leave(bob_conn, board.id)
    assert board.id in broadcaster._locks

    await broadcaster.leave(alice_conn, board.id)
    assert board.id not in broadcaster._locks
    assert broadcaster.subscribers(board.id) == []
