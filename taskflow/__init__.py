"""TaskFlow: a collaborative Kanban board service."""

__version__ = "1.0.0"
