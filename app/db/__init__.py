"""Database package"""

from app.db.session import get_db, get_engine, get_session_factory, init_models

__all__ = ["get_db", "get_engine", "get_session_factory", "init_models"]
