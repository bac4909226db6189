"""Board operations: creation, listing, membership."""
from typing import List, Optional

import structlog
from sqlalchemy import and_, func
from sqlalchemy.orm import Session

from taskflow.config import settings as default_settings
from taskflow.errors import ConflictError, NotFoundError
from taskflow.models import Board, BoardList, BoardMember, BoardRole, Task, User
from taskflow.schemas import (
    BoardCreate,
    BoardDetail,
    BoardListResponse,
    BoardMemberResponse,
    BoardResponse,
    BoardSummary,
    BoardUpdate,
)
from taskflow.services import ordering
from taskflow.services.access import get_board_or_404, require_admin, require_membership
from taskflow.services.fields import clean_title, present_fields
from taskflow.services.tasks import serialize_task, task_query

logger = structlog.get_logger()


def _serialize_board(board: Board, my_role: Optional[str] = None) -> BoardResponse:
    response = BoardResponse.model_validate(board)
    response.my_role = my_role
    return response


def _serialize_member(membership: BoardMember) -> BoardMemberResponse:
    return BoardMemberResponse(
        id=membership.user.id,
        name=membership.user.name,
        email=membership.user.email,
        avatar=membership.user.avatar,
        role=membership.role,
        joined_at=membership.joined_at,
    )


def create_board(db: Session, user: User, board_in: BoardCreate, settings=default_settings) -> BoardResponse:
    """Create a board; the creator becomes its first admin."""
    board = Board(
        title=clean_title(board_in.title),
        description=board_in.description or "",
        color=board_in.color or settings.DEFAULT_BOARD_COLOR,
        owner_id=user.id,
    )
    db.add(board)
    db.flush()
    db.add(BoardMember(board=board, user_id=user.id, role=BoardRole.ADMIN.value))
    db.commit()
    db.refresh(board)

    logger.info("Board created", board_id=board.id, user_id=user.id)
    return _serialize_board(board, BoardRole.ADMIN.value)


def list_boards(db: Session, user: User) -> List[BoardSummary]:
    list_count = (
        db.query(func.count(BoardList.id))
        .filter(BoardList.board_id == Board.id)
        .correlate(Board)
        .scalar_subquery()
    )
    task_count = (
        db.query(func.count(Task.id))
        .filter(Task.board_id == Board.id)
        .correlate(Board)
        .scalar_subquery()
    )
    rows = (
        db.query(Board, BoardMember.role, User.name, list_count, task_count)
        .join(BoardMember, and_(BoardMember.board_id == Board.id, BoardMember.user_id == user.id))
        .join(User, User.id == Board.owner_id)
        .order_by(Board.updated_at.desc(), Board.id.desc())
        .all()
    )
    return [
        BoardSummary(
            **_serialize_board(board, role).model_dump(),
            owner_name=owner_name,
            list_count=lists,
            task_count=tasks,
        )
        for board, role, owner_name, lists, tasks in rows
    ]


def get_board(db: Session, user: User, board_id: int) -> BoardDetail:
    """Full board snapshot: lists and tasks sorted by position, plus members."""
    membership = require_membership(db, board_id, user)
    board = get_board_or_404(db, board_id)

    lists = ordering.ordered(db.query(BoardList).filter(BoardList.board_id == board_id), BoardList).all()
    tasks = ordering.ordered(task_query(db).filter(Task.board_id == board_id), Task).all()

    return BoardDetail(
        board=_serialize_board(board, membership.role),
        lists=[BoardListResponse.model_validate(board_list) for board_list in lists],
        tasks=[serialize_task(task) for task in tasks],
        members=list_members(db, user, board_id),
    )


def update_board(
    db: Session, user: User, board_id: int, board_update: BoardUpdate, settings=default_settings
) -> BoardResponse:
    membership = require_membership(db, board_id, user)
    update_data = present_fields(board_update)
    if "title" in update_data:
        update_data["title"] = clean_title(update_data["title"])

    def write() -> Board:
        board = get_board_or_404(db, board_id)
        for field, value in update_data.items():
            setattr(board, field, value)
        db.commit()
        db.refresh(board)
        return board

    board = ordering.retry_on_stale(db, write, settings.MOVE_RETRY_LIMIT, board_id=board_id)
    return _serialize_board(board, membership.role)


def delete_board(db: Session, user: User, board_id: int, settings=default_settings) -> None:
    """Delete a board and, by cascade, everything it owns. Admins only."""
    require_admin(db, board_id, user, action="delete boards")

    def remove() -> None:
        db.delete(get_board_or_404(db, board_id))
        db.commit()

    ordering.retry_on_stale(db, remove, settings.MOVE_RETRY_LIMIT, board_id=board_id)
    logger.info("Board deleted", board_id=board_id, user_id=user.id)


def list_members(db: Session, user: User, board_id: int) -> List[BoardMemberResponse]:
    require_membership(db, board_id, user)
    memberships = (
        db.query(BoardMember)
        .filter(BoardMember.board_id == board_id)
        .order_by(BoardMember.joined_at.asc(), BoardMember.id.asc())
        .all()
    )
    return [_serialize_member(membership) for membership in memberships]


def add_member(db: Session, user: User, board_id: int, email: str) -> BoardMemberResponse:
    """Invite an existing user to the board by email. Admins only."""
    require_admin(db, board_id, user, action="invite members")

    invitee = db.query(User).filter(User.email == email.strip().lower()).first()
    if not invitee:
        raise NotFoundError("User not found")

    existing = (
        db.query(BoardMember)
        .filter(BoardMember.board_id == board_id, BoardMember.user_id == invitee.id)
        .first()
    )
    if existing:
        raise ConflictError("User already a member")

    membership = BoardMember(board_id=board_id, user=invitee, role=BoardRole.MEMBER.value)
    db.add(membership)
    db.commit()
    db.refresh(membership)

    logger.info("Member added", board_id=board_id, user_id=invitee.id, invited_by=user.id)
    return _serialize_member(membership)
