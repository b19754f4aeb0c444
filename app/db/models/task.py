"""SQLAlchemy ORM model for tasks table"""

from sqlalchemy import Column, String, DateTime, Float, Text, Index

from app.db.base import Base, JSONType


class Task(Base):
    """
    SQLAlchemy ORM model for the tasks table.
    Dependencies and tags are stored as JSON arrays of strings.
    """
    __tablename__ = "tasks"

    # Primary key (UUID text)
    id = Column(String(36), primary_key=True, index=True)

    # Task information
    title = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=False)
    status = Column(String, nullable=False, default="pending", index=True)
    priority = Column(Float, nullable=False, default=0, index=True)
    deadline = Column(DateTime(timezone=True), nullable=False, index=True)
    tags = Column(JSONType, nullable=False, default=list)

    # Dependency ids are not foreign keys: a dependency may point at a deleted task
    dependencies = Column(JSONType, nullable=False, default=list)

    # Effort tracking
    estimated_hours = Column(Float, nullable=True)
    actual_hours = Column(Float, nullable=False, default=0)
    completion_percentage = Column(Float, nullable=False, default=0)

    # Users
    assigned_to = Column(String(36), nullable=False, index=True)
    created_by = Column(String(36), nullable=False)

    # Timestamps (set by the service so audit snapshots match stored rows)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, index=True)

    __table_args__ = (
        Index("ix_tasks_status_priority", "status", "priority"),
        Index("ix_tasks_assigned_to_status", "assigned_to", "status"),
        Index("ix_tasks_deadline_status", "deadline", "status"),
    )

    def __repr__(self) -> str:
        return f"<Task(id={self.id}, title='{self.title}', status='{self.status}')>"
