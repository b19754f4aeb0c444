"""SQLAlchemy ORM model for users table"""

from sqlalchemy import Column, String, DateTime, Text
from sqlalchemy.sql import func

from app.db.base import Base


class User(Base):
    """
    SQLAlchemy ORM model for the users table.
    Only the fields needed for authorization are read by the backend.
    """
    __tablename__ = "users"

    # Primary key (matches the 'sub' claim of access tokens)
    id = Column(String(36), primary_key=True, index=True)

    # User information
    name = Column(Text, nullable=False)
    email = Column(String, nullable=False, unique=True, index=True)
    role = Column(String, nullable=False, default="user", index=True)
    department = Column(String, nullable=True, index=True)

    # Timestamps
    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
