"""TaskFlow Database Models"""
from taskflow.models.user import User
from taskflow.models.board import Board
from taskflow.models.board_member import BoardMember, BoardRole
from taskflow.models.board_list import BoardList
from taskflow.models.task import Task, TaskPriority
from taskflow.models.task_assignee import TaskAssignee
from taskflow.models.activity import ActivityEntry, ActivityAction, EntityType

__all__ = [
    "User",
    "Board",
    "BoardMember",
    "BoardRole",
    "BoardList",
    "Task",
    "TaskPriority",
    "TaskAssignee",
    "ActivityEntry",
    "ActivityAction",
    "EntityType",
]
