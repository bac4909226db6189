"""
Board Model
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from taskflow.database import Base


class Board(Base):
    __tablename__ = "boards"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    title = Column(String(100), nullable=False)
    description = Column(Text, default="", nullable=False)
    color = Column(String(7), default="#0052CC", nullable=False)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # Bumped on every write to the row; list inserts and reorders touch it
    # so two of them planned against the same lists cannot both commit.
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    owner = relationship("User", back_populates="owned_boards", foreign_keys=[owner_id])
    members = relationship("BoardMember", back_populates="board", cascade="all, delete")
    lists = relationship("BoardList", back_populates="board", cascade="all, delete", order_by="BoardList.position")
    tasks = relationship("Task", back_populates="board", cascade="all, delete", order_by="Task.position")
    activities = relationship("ActivityEntry", back_populates="board", cascade="all, delete")

    __mapper_args__ = {"version_id_col": version}
