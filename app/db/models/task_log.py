"""SQLAlchemy ORM model for task_logs table"""

from sqlalchemy import Column, Integer, String, DateTime, Index

from app.db.base import Base, JSONType


class TaskLog(Base):
    """
    SQLAlchemy ORM model for the task_logs table.
    Append-only audit trail: rows are inserted, never updated or deleted.
    """
    __tablename__ = "task_logs"

    # Primary key
    id = Column(Integer, primary_key=True, autoincrement=True)

    action = Column(String, nullable=False)
    task_id = Column(String(36), nullable=False)
    user_id = Column(String(36), nullable=False)

    # Full snapshot, or {"before": ..., "after": ...} for updates
    changes = Column(JSONType, nullable=False)

    timestamp = Column(DateTime(timezone=True), nullable=False)

    # "metadata" is reserved on declarative classes
    metadata_ = Column("metadata", JSONType, nullable=False, default=dict)

    __table_args__ = (
        Index("ix_task_logs_task_id_timestamp", "task_id", "timestamp"),
        Index("ix_task_logs_user_id_timestamp", "user_id", "timestamp"),
        Index("ix_task_logs_action_timestamp", "action", "timestamp"),
    )

    def __repr__(self) -> str:
        return f"<TaskLog(id={self.id}, action='{self.action}', task_id={self.task_id})>"
