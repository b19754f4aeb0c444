"""Domain models shared across features"""
from .user import Actor, User, UserRole

__all__ = ['Actor', 'User', 'UserRole']
