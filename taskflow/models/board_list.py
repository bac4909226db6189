"""
Board List Model
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from taskflow.database import Base


class BoardList(Base):
    __tablename__ = "lists"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    title = Column(String(100), nullable=False)
    board_id = Column(Integer, ForeignKey("boards.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, default=0, nullable=False)
    # Bumped on every write to the list row; moves touch the lists they
    # reorder so two concurrent moves on one list cannot both commit.
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    board = relationship("Board", back_populates="lists")
    tasks = relationship("Task", back_populates="list", cascade="all, delete", order_by="Task.position")

    __table_args__ = (
        Index("idx_lists_board_position", "board_id", "position"),
    )
    __mapper_args__ = {"version_id_col": version}
