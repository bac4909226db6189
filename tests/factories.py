"""Builders for boards, lists and tasks through the service layer."""
from sqlalchemy.orm import Session

from taskflow.models import User
from taskflow.schemas import BoardCreate, BoardListCreate, TaskCreate
from taskflow.services import boards as boards_service
from taskflow.services import lists as lists_service
from taskflow.services import tasks as tasks_service


def create_board(db: Session, owner: User, title: str = "Roadmap"):
    return boards_service.create_board(db, owner, BoardCreate(title=title))


def create_list(db: Session, user: User, board_id: int, title: str = "Todo"):
    return lists_service.create_list(db, user, board_id, BoardListCreate(title=title))


def create_task(db: Session, user: User, board_id: int, list_id: int, title: str = "Task"):
    return tasks_service.create_task(db, user, board_id, TaskCreate(title=title, list_id=list_id))


def add_member(db: Session, admin: User, board_id: int, member: User):
    return boards_service.add_member(db, admin, board_id, member.email)
