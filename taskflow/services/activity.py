"""Append-only board activity log."""
from typing import Any, Dict, Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from taskflow.config import settings as default_settings
from taskflow.errors import ValidationError
from taskflow.models import ActivityAction, ActivityEntry, EntityType, User
from taskflow.schemas import ActivityPage, ActivityResponse, Pagination
from taskflow.services.access import require_membership

logger = structlog.get_logger()


def record_activity(
    db: Session,
    board_id: int,
    user_id: int,
    action: ActivityAction,
    entity_type: EntityType,
    entity_id: int,
    entity_title: str,
    metadata: Optional[Dict[str, Any]] = None,
) -> Optional[ActivityEntry]:
    """Append an activity entry after the primary mutation has committed.

    Failures are logged and swallowed: the mutation the entry describes has
    already succeeded and must still be reported as such.
    """
    entry = ActivityEntry(
        board_id=board_id,
        user_id=user_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        entity_title=entity_title,
        details=metadata or {},
    )
    try:
        db.add(entry)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(
            "Failed to record activity",
            board_id=board_id,
            action=action.value,
            entity_type=entity_type.value,
            entity_id=entity_id,
            error=str(exc),
        )
        return None
    return entry


def _serialize_activity(entry: ActivityEntry) -> ActivityResponse:
    return ActivityResponse(
        id=entry.id,
        board_id=entry.board_id,
        user_id=entry.user_id,
        user_name=entry.user.name if entry.user else "Unknown",
        action=entry.action,
        entity_type=entry.entity_type,
        entity_id=entry.entity_id,
        entity_title=entry.entity_title,
        metadata=entry.details or {},
        created_at=entry.created_at,
    )


def list_activity(
    db: Session,
    user: User,
    board_id: int,
    page: int = 1,
    page_size: Optional[int] = None,
    settings=default_settings,
) -> ActivityPage:
    """Return a page of the board's activity, newest first."""
    require_membership(db, board_id, user)

    if page_size is None:
        page_size = settings.ACTIVITY_PAGE_SIZE
    if page < 1:
        raise ValidationError("Page must be at least 1")
    if page_size < 1 or page_size > settings.ACTIVITY_MAX_PAGE_SIZE:
        raise ValidationError(f"Page size must be between 1 and {settings.ACTIVITY_MAX_PAGE_SIZE}")

    query = db.query(ActivityEntry).filter(ActivityEntry.board_id == board_id)
    total = query.count()
    entries = (
        query.options(selectinload(ActivityEntry.user))
        .order_by(ActivityEntry.created_at.desc(), ActivityEntry.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return ActivityPage(
        activities=[_serialize_activity(entry) for entry in entries],
        pagination=Pagination(page=page, page_size=page_size, total=total),
    )
