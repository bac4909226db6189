"""Activity log model"""
import enum

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from taskflow.database import Base


class ActivityAction(str, enum.Enum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    MOVED = "moved"
    ASSIGNED = "assigned"


class EntityType(str, enum.Enum):
    LIST = "list"
    TASK = "task"


class ActivityEntry(Base):
    __tablename__ = "activity_log"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    board_id = Column(Integer, ForeignKey("boards.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    action = Column(SQLEnum(ActivityAction), nullable=False)
    entity_type = Column(SQLEnum(EntityType), nullable=False)
    # No foreign key: entries outlive the list or task they describe.
    entity_id = Column(Integer, nullable=False)
    entity_title = Column(String(200), nullable=False)
    details = Column("metadata", JSON, default=dict, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Relationships
    board = relationship("Board", back_populates="activities")
    user = relationship("User")
