"""Task operations, including the ordered move between lists."""
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Query, Session, selectinload

from taskflow.config import settings as default_settings
from taskflow.errors import NotFoundError, ValidationError
from taskflow.models import ActivityAction, BoardList, EntityType, Task, TaskAssignee, User
from taskflow.schemas import (
    ListOrder,
    MoveResult,
    TaskCreate,
    TaskMove,
    TaskPage,
    TaskPosition,
    TaskResponse,
    TaskUpdate,
)
from taskflow.services import ordering
from taskflow.services.access import get_membership, require_membership
from taskflow.services.activity import record_activity
from taskflow.services.fields import clean_title, present_fields

TITLE_MAX_LENGTH = 200


def task_query(db: Session) -> Query:
    return db.query(Task).options(
        selectinload(Task.creator),
        selectinload(Task.assignees).selectinload(TaskAssignee.user),
    )


def serialize_task(task: Task) -> TaskResponse:
    return TaskResponse(
        id=task.id,
        title=task.title,
        description=task.description or "",
        list_id=task.list_id,
        board_id=task.board_id,
        position=task.position,
        priority=task.priority,
        due_date=task.due_date,
        created_by=task.created_by_id,
        creator_name=task.creator.name if task.creator else None,
        assignee_ids=[assignment.user_id for assignment in task.assignees],
        assignee_names=[assignment.user.name for assignment in task.assignees],
        created_at=task.created_at,
        updated_at=task.updated_at,
    )


def _load_task(db: Session, board_id: int, task_id: int) -> Task:
    task = task_query(db).filter(Task.id == task_id, Task.board_id == board_id).first()
    if not task:
        raise NotFoundError("Task not found")
    return task


def _load_list(db: Session, board_id: int, list_id: int) -> BoardList:
    board_list = (
        db.query(BoardList)
        .filter(BoardList.id == list_id, BoardList.board_id == board_id)
        .first()
    )
    if not board_list:
        raise NotFoundError("List not found")
    return board_list


def _hydrate(db: Session, board_id: int, task_id: int) -> TaskResponse:
    return serialize_task(_load_task(db, board_id, task_id))


def get_task(db: Session, user: User, board_id: int, task_id: int) -> TaskResponse:
    require_membership(db, board_id, user)
    return _hydrate(db, board_id, task_id)


def search_tasks(
    db: Session,
    user: User,
    board_id: int,
    search: str = "",
    list_id: Optional[int] = None,
    page: int = 1,
    limit: Optional[int] = None,
    settings=default_settings,
) -> TaskPage:
    require_membership(db, board_id, user)

    if limit is None:
        limit = settings.TASK_PAGE_SIZE
    if page < 1 or limit < 1:
        raise ValidationError("Page and limit must be positive")

    query = task_query(db).filter(Task.board_id == board_id)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(Task.title.ilike(pattern), Task.description.ilike(pattern)))
    if list_id is not None:
        query = query.filter(Task.list_id == list_id)

    tasks = ordering.ordered(query, Task).offset((page - 1) * limit).limit(limit).all()
    return TaskPage(tasks=[serialize_task(task) for task in tasks], page=page, limit=limit)


def _insert_task(db: Session, user: User, board_id: int, task_in: TaskCreate, title: str) -> int:
    board_list = _load_list(db, board_id, task_in.list_id)
    task = Task(
        title=title,
        description=task_in.description or "",
        list=board_list,
        board=board_list.board,
        position=ordering.next_position(db, Task, Task.list_id == board_list.id),
        priority=task_in.priority,
        due_date=task_in.due_date,
        created_by_id=user.id,
    )
    db.add(task)
    # Touching the list bumps its version, so a move into it that commits
    # after the append position was read makes this commit fail.
    board_list.updated_at = func.now()
    board_list.board.updated_at = func.now()
    db.commit()
    return task.id


def create_task(
    db: Session, user: User, board_id: int, task_in: TaskCreate, settings=default_settings
) -> TaskResponse:
    """Append a new task to the end of its list."""
    require_membership(db, board_id, user)
    title = clean_title(task_in.title, TITLE_MAX_LENGTH)

    task_id = ordering.retry_on_stale(
        db,
        lambda: _insert_task(db, user, board_id, task_in, title),
        settings.MOVE_RETRY_LIMIT,
        board_id=board_id,
        list_id=task_in.list_id,
    )

    record_activity(db, board_id, user.id, ActivityAction.CREATED, EntityType.TASK, task_id, title)
    return _hydrate(db, board_id, task_id)


def update_task(db: Session, user: User, board_id: int, task_id: int, task_update: TaskUpdate) -> TaskResponse:
    """Partial update: fields left out of the request keep their stored value."""
    require_membership(db, board_id, user)
    task = _load_task(db, board_id, task_id)

    update_data = present_fields(task_update)
    if "title" in update_data:
        update_data["title"] = clean_title(update_data["title"], TITLE_MAX_LENGTH)
    for field, value in update_data.items():
        setattr(task, field, value)
    db.commit()

    record_activity(db, board_id, user.id, ActivityAction.UPDATED, EntityType.TASK, task.id, task.title)
    return _hydrate(db, board_id, task_id)


def delete_task(db: Session, user: User, board_id: int, task_id: int) -> TaskResponse:
    """Hard-delete a task and its assignments; returns the last known state."""
    require_membership(db, board_id, user)
    task = _load_task(db, board_id, task_id)
    snapshot = serialize_task(task)

    db.delete(task)
    db.commit()

    record_activity(db, board_id, user.id, ActivityAction.DELETED, EntityType.TASK, snapshot.id, snapshot.title)
    return snapshot


def _apply_move(db: Session, board_id: int, move_in: TaskMove) -> Optional[dict]:
    """Shift the destination tail and place the task, as one transaction.

    Returns ``None`` when the task already sits at the requested slot.
    Raises ``StaleDataError`` when another writer touched one of the lists
    since they were read.
    """
    task = _load_task(db, board_id, move_in.task_id)
    if task.list_id != move_in.from_list_id:
        raise NotFoundError("Task not found in source list")

    source = _load_list(db, board_id, move_in.from_list_id)
    if move_in.to_list_id == source.id:
        destination = source
    else:
        destination = _load_list(db, board_id, move_in.to_list_id)

    siblings = ordering.ordered(
        db.query(Task.id, Task.position).filter(Task.list_id == destination.id, Task.id != task.id),
        Task,
    ).all()

    if destination is source:
        current_index = sum(1 for _, position in siblings if position < task.position)
        if current_index == min(move_in.to_index, len(siblings)):
            return None

    plan = ordering.plan_insert([position for _, position in siblings], move_in.to_index)
    if plan.shift_from is not None:
        ordering.shift_positions(db, Task, Task.list_id == destination.id, plan.shift_from, exclude_id=task.id)

    if destination is not source:
        task.list = destination
    task.position = plan.position

    # Bump both list versions so a concurrent move on either list fails to commit.
    destination.updated_at = func.now()
    if destination is not source:
        source.updated_at = func.now()

    details = {"task_title": task.title, "from": source.title, "to": destination.title}
    db.commit()
    return details


def _list_order(db: Session, list_id: int) -> ListOrder:
    rows = ordering.ordered(db.query(Task.id, Task.position).filter(Task.list_id == list_id), Task).all()
    return ListOrder(list_id=list_id, tasks=[TaskPosition(id=task_id, position=position) for task_id, position in rows])


def move_task(db: Session, user: User, board_id: int, move_in: TaskMove, settings=default_settings) -> MoveResult:
    """Move a task to ``to_index`` of ``to_list_id``.

    Cross-list moves record one ``moved`` activity entry; reordering within
    a list records none. The result carries the resulting order of every
    list the move touched, so other clients can update sibling positions.
    """
    require_membership(db, board_id, user)

    details = ordering.retry_on_stale(
        db,
        lambda: _apply_move(db, board_id, move_in),
        settings.MOVE_RETRY_LIMIT,
        board_id=board_id,
        task_id=move_in.task_id,
    )

    lists = []
    if details is not None:
        lists.append(_list_order(db, move_in.to_list_id))
        if move_in.from_list_id != move_in.to_list_id:
            lists.append(_list_order(db, move_in.from_list_id))
            record_activity(
                db,
                board_id,
                user.id,
                ActivityAction.MOVED,
                EntityType.TASK,
                move_in.task_id,
                details["task_title"],
                {"from": details["from"], "to": details["to"]},
            )

    return MoveResult(
        task=_hydrate(db, board_id, move_in.task_id),
        from_list_id=move_in.from_list_id,
        to_list_id=move_in.to_list_id,
        to_index=move_in.to_index,
        moved=details is not None,
        lists=lists,
    )


def assign_user(db: Session, user: User, board_id: int, task_id: int, assignee_id: int) -> TaskResponse:
    """Assign a board member to a task. Assigning twice is a no-op."""
    require_membership(db, board_id, user)
    task = _load_task(db, board_id, task_id)

    if get_membership(db, board_id, assignee_id) is None:
        raise ValidationError("User is not a board member")

    if any(assignment.user_id == assignee_id for assignment in task.assignees):
        return serialize_task(task)

    task.assignees.append(TaskAssignee(user_id=assignee_id))
    db.commit()

    assignee = db.get(User, assignee_id)
    record_activity(
        db,
        board_id,
        user.id,
        ActivityAction.ASSIGNED,
        EntityType.TASK,
        task.id,
        task.title,
        {"assignee": assignee.name if assignee else None},
    )
    return _hydrate(db, board_id, task_id)


def unassign_user(db: Session, user: User, board_id: int, task_id: int, assignee_id: int) -> TaskResponse:
    require_membership(db, board_id, user)
    task = _load_task(db, board_id, task_id)

    assignment = next((item for item in task.assignees if item.user_id == assignee_id), None)
    if assignment is None:
        return serialize_task(task)

    task.assignees.remove(assignment)
    db.commit()
    return _hydrate(db, board_id, task_id)
