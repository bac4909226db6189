"""List operations on a board."""
from typing import List

from sqlalchemy import func
from sqlalchemy.orm import Session

from taskflow.config import settings as default_settings
from taskflow.errors import NotFoundError
from taskflow.models import ActivityAction, BoardList, EntityType, User
from taskflow.schemas import BoardListCreate, BoardListResponse, BoardListUpdate, ListPosition
from taskflow.services import ordering
from taskflow.services.access import get_board_or_404, require_membership
from taskflow.services.activity import record_activity
from taskflow.services.fields import clean_title, present_fields


def _load_list(db: Session, board_id: int, list_id: int) -> BoardList:
    board_list = (
        db.query(BoardList)
        .filter(BoardList.id == list_id, BoardList.board_id == board_id)
        .first()
    )
    if not board_list:
        raise NotFoundError("List not found")
    return board_list


def _insert_list(db: Session, board_id: int, title: str) -> BoardList:
    board = get_board_or_404(db, board_id)
    board_list = BoardList(
        title=title,
        board=board,
        position=ordering.next_position(db, BoardList, BoardList.board_id == board_id),
    )
    db.add(board_list)
    # Bumps the board version; a concurrent insert or reorder fails to commit.
    board.updated_at = func.now()
    db.commit()
    db.refresh(board_list)
    return board_list


def create_list(
    db: Session, user: User, board_id: int, list_in: BoardListCreate, settings=default_settings
) -> BoardListResponse:
    """Append a list after the board's current last list."""
    require_membership(db, board_id, user)
    title = clean_title(list_in.title)

    board_list = ordering.retry_on_stale(
        db, lambda: _insert_list(db, board_id, title), settings.MOVE_RETRY_LIMIT, board_id=board_id
    )

    record_activity(db, board_id, user.id, ActivityAction.CREATED, EntityType.LIST, board_list.id, title)
    return BoardListResponse.model_validate(board_list)


def update_list(
    db: Session, user: User, board_id: int, list_id: int, list_update: BoardListUpdate, settings=default_settings
) -> BoardListResponse:
    require_membership(db, board_id, user)
    update_data = present_fields(list_update)

    def rename() -> BoardList:
        board_list = _load_list(db, board_id, list_id)
        if "title" in update_data:
            board_list.title = clean_title(update_data["title"])
        db.commit()
        db.refresh(board_list)
        return board_list

    board_list = ordering.retry_on_stale(db, rename, settings.MOVE_RETRY_LIMIT, board_id=board_id, list_id=list_id)

    record_activity(db, board_id, user.id, ActivityAction.UPDATED, EntityType.LIST, board_list.id, board_list.title)
    return BoardListResponse.model_validate(board_list)


def delete_list(
    db: Session, user: User, board_id: int, list_id: int, settings=default_settings
) -> BoardListResponse:
    """Delete a list together with its tasks and their assignments."""
    require_membership(db, board_id, user)

    def remove() -> BoardListResponse:
        board_list = _load_list(db, board_id, list_id)
        snapshot = BoardListResponse.model_validate(board_list)
        db.delete(board_list)
        db.commit()
        return snapshot

    snapshot = ordering.retry_on_stale(db, remove, settings.MOVE_RETRY_LIMIT, board_id=board_id, list_id=list_id)

    record_activity(db, board_id, user.id, ActivityAction.DELETED, EntityType.LIST, snapshot.id, snapshot.title)
    return snapshot


def reorder_lists(
    db: Session, user: User, board_id: int, items: List[ListPosition], settings=default_settings
) -> List[BoardListResponse]:
    """Apply caller-supplied positions to the board's lists as given."""
    require_membership(db, board_id, user)

    def reorder() -> None:
        board = get_board_or_404(db, board_id)
        ordering.apply_positions(
            db,
            BoardList,
            BoardList.board_id == board_id,
            [(item.id, item.position) for item in items],
        )
        board.updated_at = func.now()
        db.commit()

    ordering.retry_on_stale(db, reorder, settings.MOVE_RETRY_LIMIT, board_id=board_id)

    lists = ordering.ordered(db.query(BoardList).filter(BoardList.board_id == board_id), BoardList).all()
    return [BoardListResponse.model_validate(board_list) for board_list in lists]
