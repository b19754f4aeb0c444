"""Translate SQLAlchemy failures into StorageError"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import StorageError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def storage_errors(db: AsyncSession, action: str) -> AsyncIterator[None]:
    """Roll back the session and raise StorageError if the block fails in the database"""
    try:
        yield
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to {action}: {e}")
        raise StorageError(f"Failed to {action}") from e
