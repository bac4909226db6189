"""
Board Member Model
"""
import enum

from sqlalchemy import Column, Integer, DateTime, ForeignKey, UniqueConstraint, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from taskflow.database import Base


class BoardRole(str, enum.Enum):
    ADMIN = "admin"
    MEMBER = "member"


class BoardMember(Base):
    __tablename__ = "board_members"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    board_id = Column(Integer, ForeignKey("boards.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    role = Column(String(50), default=BoardRole.MEMBER.value, nullable=False)  # member, admin
    joined_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Relationships
    board = relationship("Board", back_populates="members")
    user = relationship("User", back_populates="board_memberships")

    __table_args__ = (
        UniqueConstraint('board_id', 'user_id', name='unique_board_member'),
    )
