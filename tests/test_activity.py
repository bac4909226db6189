import pytest
from sqlalchemy.exc import SQLAlchemyError

from taskflow.errors import AuthorizationError, ValidationError
from taskflow.models import ActivityAction, ActivityEntry, EntityType
from taskflow.services.activity import list_activity, record_activity

from tests.factories import create_board, create_list


def test_activity_is_newest_first_and_paginated(db_session, make_user):
    alice = make_user("Alice")
    board = create_board(db_session, alice)
    for title in ("A", "B", "C"):
        create_list(db_session, alice, board.id, title)

    first_page = list_activity(db_session, alice, board.id, page=1, page_size=2)
    second_page = list_activity(db_session, alice, board.id, page=2, page_size=2)

    assert [entry.entity_title for entry in first_page.activities] == ["C", "B"]
    assert [entry.entity_title for entry in second_page.activities] == ["A"]
    assert first_page.pagination.total == 3
    assert first_page.activities[0].user_name == "Alice"


def test_activity_page_bounds(db_session, make_user, settings):
    alice = make_user("Alice")
    board = create_board(db_session, alice)

    with pytest.raises(ValidationError):
        list_activity(db_session, alice, board.id, page=0)
    with pytest.raises(ValidationError):
        list_activity(db_session, alice, board.id, page_size=settings.ACTIVITY_MAX_PAGE_SIZE + 1, settings=settings)


def test_activity_requires_membership(db_session, make_user):
    alice = make_user("Alice")
    board = create_board(db_session, alice)

    with pytest.raises(AuthorizationError):
        list_activity(db_session, make_user("Mallory"), board.id)


def test_record_activity_failure_is_swallowed(db_session, make_user, monkeypatch):
    alice = make_user("Alice")
    board = create_board(db_session, alice)

    def broken_commit():
        raise SQLAlchemyError("disk full")

    monkeypatch.setattr(db_session, "commit", broken_commit)
    entry = record_activity(
        db_session, board.id, alice.id, ActivityAction.CREATED, EntityType.LIST, 1, "Todo"
    )
    monkeypatch.undo()

    assert entry is None
    assert db_session.query(ActivityEntry).count() == 0
