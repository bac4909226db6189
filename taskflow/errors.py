"""Error taxonomy shared by the HTTP and real-time layers."""
from typing import Dict


class TaskFlowError(Exception):
    """Base class for errors surfaced to callers.

    Every error carries a stable machine-readable ``kind`` and a
    human-readable message; nothing else reaches the client.
    """

    kind = "internal_error"
    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, str]:
        return {"kind": self.kind, "message": self.message}


class AuthenticationError(TaskFlowError):
    kind = "authentication_error"
    status_code = 401


class AuthorizationError(TaskFlowError):
    kind = "authorization_error"
    status_code = 403


class NotFoundError(TaskFlowError):
    kind = "not_found"
    status_code = 404


class ValidationError(TaskFlowError):
    kind = "validation_error"
    status_code = 400


class ConflictError(TaskFlowError):
    kind = "conflict"
    status_code = 409


class InternalError(TaskFlowError):
    kind = "internal_error"
    status_code = 500
