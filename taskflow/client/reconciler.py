"""Local board state for a connected client.

A client applies its own drag-and-drop moves optimistically with
``move_locally`` and then folds every server event into the same state.
Server payloads are authoritative: ``reconcile`` replaces whatever the
client guessed with the task the server returned, so replaying an event is
harmless and the last event for a task wins.
"""
from typing import Any, Callable, Dict, List, Optional

from taskflow.services.ordering import apply_insert_plan, plan_insert

Task = Dict[str, Any]


def _by_position(item: Dict[str, Any]):
    return (item.get("position", 0), item.get("id", 0))


class BoardState:
    def __init__(
        self,
        board: Optional[Dict[str, Any]] = None,
        lists: Optional[List[Dict[str, Any]]] = None,
        tasks: Optional[Dict[int, List[Task]]] = None,
        members: Optional[List[Dict[str, Any]]] = None,
    ):
        self.board = board
        self.lists: List[Dict[str, Any]] = sorted(lists or [], key=_by_position)
        self.tasks: Dict[int, List[Task]] = {board_list["id"]: [] for board_list in self.lists}
        for list_id, list_tasks in (tasks or {}).items():
            self.tasks[list_id] = sorted(list_tasks, key=_by_position)
        self.members: List[Dict[str, Any]] = list(members or [])
        self.online_users: List[Dict[str, Any]] = []
        self.viewing: Dict[int, Any] = {}

    @classmethod
    def from_snapshot(cls, snapshot: Dict[str, Any]) -> "BoardState":
        """Build state from a ``GET /api/boards/{id}`` response body."""
        grouped: Dict[int, List[Task]] = {}
        for task in snapshot.get("tasks", []):
            grouped.setdefault(task["list_id"], []).append(task)
        return cls(
            board=snapshot.get("board"),
            lists=snapshot.get("lists", []),
            tasks=grouped,
            members=snapshot.get("members", []),
        )

    def task_ids(self, list_id: int) -> List[int]:
        return [task["id"] for task in self.tasks.get(list_id, [])]

    def find_task(self, task_id: int) -> Optional[Task]:
        for list_tasks in self.tasks.values():
            for task in list_tasks:
                if task["id"] == task_id:
                    return task
        return None

    # Tasks

    def move_locally(self, task_id: int, from_list_id: int, to_list_id: int, index: int) -> bool:
        """Optimistically move a task the way the server will.

        Returns False when the task is not in ``from_list_id``.
        """
        source = self.tasks.get(from_list_id, [])
        task = next((item for item in source if item["id"] == task_id), None)
        if task is None:
            return False

        self.tasks[from_list_id] = [item for item in source if item["id"] != task_id]
        siblings = self.tasks.setdefault(to_list_id, [])
        positions = {item["id"]: item.get("position", 0) for item in siblings}
        plan = plan_insert(sorted(positions.values()), index)
        apply_insert_plan(positions, task_id, plan)

        moved = dict(task, list_id=to_list_id)
        updated = [dict(item, position=positions[item["id"]]) for item in siblings]
        updated.append(dict(moved, position=positions[task_id]))
        self.tasks[to_list_id] = sorted(updated, key=_by_position)
        return True

    def reconcile(self, task: Task) -> None:
        """Place the server's copy of ``task`` in its list, replacing any local copy."""
        self.remove_task(task["id"])
        list_tasks = self.tasks.setdefault(task["list_id"], [])
        list_tasks.append(task)
        list_tasks.sort(key=_by_position)

    def remove_task(self, task_id: int) -> None:
        for list_id, list_tasks in self.tasks.items():
            self.tasks[list_id] = [task for task in list_tasks if task["id"] != task_id]

    def apply_task_positions(self, list_id: int, tasks: List[Dict[str, Any]]) -> None:
        """Adopt the server's positions for the tasks of one list."""
        positions = {item["id"]: item["position"] for item in tasks}
        updated = [
            dict(task, position=positions.get(task["id"], task.get("position", 0)))
            for task in self.tasks.get(list_id, [])
        ]
        self.tasks[list_id] = sorted(updated, key=_by_position)

    # Lists

    def upsert_list(self, board_list: Dict[str, Any]) -> None:
        self.lists = [item for item in self.lists if item["id"] != board_list["id"]]
        self.lists.append(board_list)
        self.lists.sort(key=_by_position)
        self.tasks.setdefault(board_list["id"], [])

    def remove_list(self, list_id: int) -> None:
        self.lists = [item for item in self.lists if item["id"] != list_id]
        self.tasks.pop(list_id, None)

    def apply_list_positions(self, lists: List[Dict[str, Any]]) -> None:
        positions = {item["id"]: item["position"] for item in lists}
        self.lists = sorted(
            (dict(item, position=positions.get(item["id"], item.get("position", 0))) for item in self.lists),
            key=_by_position,
        )

    # Presence

    def set_online_users(self, users: List[Dict[str, Any]]) -> None:
        self.online_users = []
        for user in users:
            self.add_online_user(user)

    def add_online_user(self, user: Dict[str, Any]) -> None:
        self.online_users = [item for item in self.online_users if item["user_id"] != user["user_id"]]
        self.online_users.append(user)

    def remove_online_user(self, user_id: int) -> None:
        self.online_users = [item for item in self.online_users if item["user_id"] != user_id]
        self.viewing.pop(user_id, None)

    # Events

    def apply_event(self, event: str, data: Dict[str, Any]) -> bool:
        """Fold a server event into the state; False when the event is not a state change."""
        handler = self._handlers().get(event)
        if handler is None:
            return False
        handler(data)
        return True

    def _handlers(self) -> Dict[str, Callable[[Dict[str, Any]], None]]:
        return {
            "board:joined": lambda data: self.set_online_users(data.get("online_users", [])),
            "board:updated": self._on_board_updated,
            "board:deleted": lambda data: self.clear(),
            "member:added": self._on_member_added,
            "user:online": self.add_online_user,
            "user:offline": lambda data: self.remove_online_user(data["user_id"]),
            "list:created": lambda data: self.upsert_list(data["list"]),
            "list:updated": lambda data: self.upsert_list(data["list"]),
            "list:deleted": lambda data: self.remove_list(data["list_id"]),
            "lists:reordered": lambda data: self.apply_list_positions(data["lists"]),
            "task:created": lambda data: self.reconcile(data["task"]),
            "task:updated": lambda data: self.reconcile(data["task"]),
            "task:moved": self._on_task_moved,
            "task:deleted": lambda data: self.remove_task(data["task_id"]),
            "task:viewing": self._on_task_viewing,
        }

    def _on_board_updated(self, data: Dict[str, Any]) -> None:
        self.board = dict(self.board or {}, **data["board"])

    def _on_member_added(self, data: Dict[str, Any]) -> None:
        member = data["member"]
        self.members = [item for item in self.members if item["id"] != member["id"]]
        self.members.append(member)

    def _on_task_moved(self, data: Dict[str, Any]) -> None:
        # Siblings shifted by the move only travel in "lists".
        for order in data.get("lists", []):
            self.apply_task_positions(order["list_id"], order["tasks"])
        self.reconcile(data["task"])

    def _on_task_viewing(self, data: Dict[str, Any]) -> None:
        self.viewing[data["user_id"]] = data.get("task_id")

    def clear(self) -> None:
        self.board = None
        self.lists = []
        self.tasks = {}
        self.members = []
        self.online_users = []
        self.viewing = {}


def reconcile(state: BoardState, task: Task) -> BoardState:
    """Fold an authoritative task into ``state`` and return it."""
    state.reconcile(task)
    return state
