"""Board membership checks shared by the mutation services and room joins."""
from typing import Optional

from sqlalchemy.orm import Session

from taskflow.errors import AuthorizationError, NotFoundError
from taskflow.models import Board, BoardMember, BoardRole, User


def get_membership(db: Session, board_id: int, user_id: int) -> Optional[BoardMember]:
    return (
        db.query(BoardMember)
        .filter(BoardMember.board_id == board_id, BoardMember.user_id == user_id)
        .first()
    )


def get_board_or_404(db: Session, board_id: int) -> Board:
    board = db.query(Board).filter(Board.id == board_id).first()
    if not board:
        raise NotFoundError("Board not found")
    return board


def require_membership(db: Session, board_id: int, user: User) -> BoardMember:
    get_board_or_404(db, board_id)
    membership = get_membership(db, board_id, user.id)
    if membership is None:
        raise AuthorizationError("Access denied to this board")
    return membership


def require_admin(db: Session, board_id: int, user: User, action: str = "manage this board") -> BoardMember:
    membership = require_membership(db, board_id, user)
    if membership.role != BoardRole.ADMIN.value:
        raise AuthorizationError(f"Only admins can {action}")
    return membership
