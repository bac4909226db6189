"""Integer ordering of sibling rows (tasks within a list, lists within a board).

Positions are plain integers, unique within their scope at rest but not
necessarily contiguous. Appends take ``max + 1``; inserting at an index
shifts the tail of the collection up by one and hands the vacated value to
the moving item, so a move rewrites only the rows at or after its target.
"""
from dataclasses import dataclass
from typing import Callable, Hashable, Iterable, MutableMapping, Optional, Sequence, Tuple, TypeVar

import structlog
from sqlalchemy import func
from sqlalchemy.orm import Query, Session
from sqlalchemy.orm.exc import StaleDataError

from taskflow.errors import ConflictError, ValidationError

logger = structlog.get_logger()

T = TypeVar("T")


@dataclass(frozen=True)
class InsertPlan:
    """Where a moving item lands and which siblings make room for it."""

    position: int
    shift_from: Optional[int] = None


def append_position(positions: Iterable[int]) -> int:
    positions = list(positions)
    if not positions:
        return 0
    return max(positions) + 1


def plan_insert(sibling_positions: Sequence[int], index: int) -> InsertPlan:
    """Plan an insert at ``index`` among siblings (the moving item excluded)."""
    if index < 0:
        raise ValidationError("Index must not be negative")

    ordered = sorted(sibling_positions)
    if index >= len(ordered):
        return InsertPlan(position=append_position(ordered))

    target = ordered[index]
    return InsertPlan(position=target, shift_from=target)


def apply_insert_plan(positions: MutableMapping[Hashable, int], item_key: Hashable, plan: InsertPlan) -> None:
    """Apply ``plan`` to an in-memory ``key -> position`` mapping of the siblings."""
    if plan.shift_from is not None:
        for key, position in list(positions.items()):
            if position >= plan.shift_from:
                positions[key] = position + 1
    positions[item_key] = plan.position


def ordered(query: Query, model) -> Query:
    # Ties only exist after a malformed bulk reorder; id keeps reads deterministic.
    return query.order_by(model.position.asc(), model.id.asc())


def next_position(db: Session, model, scope) -> int:
    current = db.query(func.max(model.position)).filter(scope).scalar()
    return 0 if current is None else current + 1


def shift_positions(db: Session, model, scope, shift_from: int, exclude_id: Optional[int] = None) -> int:
    """Move every row in ``scope`` at or after ``shift_from`` up by one, in a single UPDATE."""
    query = db.query(model).filter(scope, model.position >= shift_from)
    if exclude_id is not None:
        query = query.filter(model.id != exclude_id)
    return query.update({model.position: model.position + 1}, synchronize_session="fetch")


def apply_positions(db: Session, model, scope, pairs: Iterable[Tuple[int, int]]) -> int:
    """Set explicit positions for rows in ``scope``.

    The caller owns the ordering: duplicate positions are accepted as given
    and ids outside the scope are skipped.
    """
    rows = {row.id: row for row in db.query(model).filter(scope)}
    updated = 0
    for item_id, position in pairs:
        row = rows.get(item_id)
        if row is None:
            continue
        row.position = position
        updated += 1
    return updated


def retry_on_stale(db: Session, operation: Callable[[], T], limit: int, **log_context) -> T:
    """Run ``operation`` until it commits without a version conflict.

    Writers that change the order of a collection bump the version of the
    row that owns it (the list for tasks, the board for lists), so two
    writers planning against the same snapshot cannot both commit. The
    loser is rolled back and replanned from fresh state, at most ``limit``
    times.
    """
    attempts = 0
    while True:
        try:
            return operation()
        except StaleDataError:
            db.rollback()
            attempts += 1
            logger.warning("Concurrent modification, retrying", attempt=attempts, **log_context)
            if attempts >= limit:
                raise ConflictError("Board was modified concurrently, please retry")
