from datetime import date

import pytest

from taskflow.errors import AuthorizationError, NotFoundError, ValidationError
from taskflow.models import ActivityAction, ActivityEntry, EntityType, TaskAssignee, TaskPriority
from taskflow.schemas import TaskCreate, TaskUpdate
from taskflow.services import tasks as tasks_service

from tests.factories import add_member, create_board, create_list, create_task


@pytest.fixture
def board_setup(db_session, make_user):
    alice = make_user("Alice")
    bob = make_user("Bob")
    board = create_board(db_session, alice)
    add_member(db_session, alice, board.id, bob)
    todo = create_list(db_session, alice, board.id, "Todo")
    done = create_list(db_session, alice, board.id, "Done")
    return alice, bob, board, todo, done


def test_create_task_appends_and_hydrates(db_session, board_setup):
    alice, _, board, todo, _ = board_setup

    first = create_task(db_session, alice, board.id, todo.id, "First")
    second = create_task(db_session, alice, board.id, todo.id, "Second")

    assert (first.position, second.position) == (0, 1)
    assert second.creator_name == "Alice"
    assert second.priority == TaskPriority.MEDIUM
    assert second.assignee_ids == []


def test_create_task_in_foreign_list_is_not_found(db_session, board_setup):
    alice, _, board, _, _ = board_setup
    other = create_board(db_session, alice, "Other")
    foreign = create_list(db_session, alice, other.id)

    with pytest.raises(NotFoundError):
        create_task(db_session, alice, board.id, foreign.id)


def test_create_task_rejects_blank_title(db_session, board_setup):
    alice, _, board, todo, _ = board_setup
    with pytest.raises(ValidationError):
        tasks_service.create_task(db_session, alice, board.id, TaskCreate(title="  ", list_id=todo.id))


def test_update_task_keeps_omitted_fields(db_session, board_setup):
    alice, _, board, todo, _ = board_setup
    task = tasks_service.create_task(
        db_session,
        alice,
        board.id,
        TaskCreate(title="Write docs", description="all of them", list_id=todo.id, due_date=date(2030, 1, 1)),
    )

    updated = tasks_service.update_task(
        db_session, alice, board.id, task.id, TaskUpdate(priority=TaskPriority.HIGH, due_date=None)
    )

    assert updated.priority == TaskPriority.HIGH
    assert updated.title == "Write docs"
    assert updated.description == "all of them"
    assert updated.due_date == date(2030, 1, 1)


def test_search_tasks_matches_title_and_description(db_session, board_setup):
    alice, _, board, todo, done = board_setup
    create_task(db_session, alice, board.id, todo.id, "Fix login")
    tasks_service.create_task(
        db_session, alice, board.id, TaskCreate(title="Other", description="login page copy", list_id=done.id)
    )
    create_task(db_session, alice, board.id, todo.id, "Unrelated")

    page = tasks_service.search_tasks(db_session, alice, board.id, search="login")
    assert {task.title for task in page.tasks} == {"Fix login", "Other"}

    filtered = tasks_service.search_tasks(db_session, alice, board.id, search="login", list_id=todo.id)
    assert [task.title for task in filtered.tasks] == ["Fix login"]


def test_delete_task_returns_snapshot_and_records_activity(db_session, board_setup):
    alice, _, board, todo, _ = board_setup
    task = create_task(db_session, alice, board.id, todo.id, "Doomed")

    snapshot = tasks_service.delete_task(db_session, alice, board.id, task.id)

    assert snapshot.list_id == todo.id
    with pytest.raises(NotFoundError):
        tasks_service.get_task(db_session, alice, board.id, task.id)
    entry = db_session.query(ActivityEntry).order_by(ActivityEntry.id.desc()).first()
    assert entry.action == ActivityAction.DELETED
    assert entry.entity_type == EntityType.TASK
    assert entry.entity_title == "Doomed"


def test_assign_user_is_idempotent(db_session, board_setup):
    alice, bob, board, todo, _ = board_setup
    task = create_task(db_session, alice, board.id, todo.id)

    first = tasks_service.assign_user(db_session, alice, board.id, task.id, bob.id)
    second = tasks_service.assign_user(db_session, alice, board.id, task.id, bob.id)

    assert first.assignee_ids == [bob.id]
    assert second.assignee_names == ["Bob"]
    assert db_session.query(TaskAssignee).count() == 1
    assigned = db_session.query(ActivityEntry).filter_by(action=ActivityAction.ASSIGNED).all()
    assert len(assigned) == 1
    assert assigned[0].details == {"assignee": "Bob"}


def test_assign_non_member_is_rejected(db_session, board_setup, make_user):
    alice, _, board, todo, _ = board_setup
    stranger = make_user("Stranger")
    task = create_task(db_session, alice, board.id, todo.id)

    with pytest.raises(ValidationError):
        tasks_service.assign_user(db_session, alice, board.id, task.id, stranger.id)


def test_unassign_is_idempotent(db_session, board_setup):
    alice, bob, board, todo, _ = board_setup
    task = create_task(db_session, alice, board.id, todo.id)
    tasks_service.assign_user(db_session, alice, board.id, task.id, bob.id)

    result = tasks_service.unassign_user(db_session, alice, board.id, task.id, bob.id)
    again = tasks_service.unassign_user(db_session, alice, board.id, task.id, bob.id)

    assert result.assignee_ids == []
    assert again.assignee_ids == []
    assert db_session.query(TaskAssignee).count() == 0


def test_non_member_cannot_touch_tasks(db_session, board_setup, make_user):
    alice, _, board, todo, _ = board_setup
    mallory = make_user("Mallory")
    task = create_task(db_session, alice, board.id, todo.id)

    with pytest.raises(AuthorizationError):
        tasks_service.get_task(db_session, mallory, board.id, task.id)
    with pytest.raises(AuthorizationError):
        tasks_service.delete_task(db_session, mallory, board.id, task.id)
