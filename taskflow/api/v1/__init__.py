from taskflow.api.v1 import auth, boards, lists, realtime, tasks

__all__ = ["auth", "boards", "lists", "realtime", "tasks"]
