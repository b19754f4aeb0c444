"""User domain model"""
from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel


class UserRole(str, Enum):
    """Roles used for authorization decisions"""
    ADMIN = "admin"
    MANAGER = "manager"
    USER = "user"


class User(BaseModel):
    """User record as stored in the users table"""
    id: str
    name: str
    email: str
    role: UserRole = UserRole.USER
    department: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class Actor(BaseModel):
    """Identity of the caller performing a mutation"""
    id: str
    role: UserRole
