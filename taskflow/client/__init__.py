"""Client-side board state kept in sync with server events."""
from taskflow.client.reconciler import BoardState, reconcile

__all__ = ["BoardState", "reconcile"]
