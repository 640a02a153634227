"""Shared plumbing for the record stores.

Every store call runs under a timeout; a timeout or a connection-level
database error becomes StoreUnavailable. Constraint violations
(IntegrityError) are left alone so callers can map them to business errors.
"""

import asyncio
import uuid
from collections.abc import Awaitable
from typing import Any, TypeVar

import structlog
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from brickbase.config import settings
from brickbase.errors import InvalidId, StoreUnavailable

logger = structlog.get_logger()

T = TypeVar("T")


async def guarded(awaitable: Awaitable[T], timeout: float | None = None) -> T:
    """Await a store operation with a deadline."""
    try:
        return await asyncio.wait_for(
            awaitable, timeout or settings.store_timeout_seconds
        )
    except asyncio.TimeoutError as e:
        logger.error("store.timeout", timeout=timeout or settings.store_timeout_seconds)
        raise StoreUnavailable("Store operation timed out") from e
    except (OperationalError, InterfaceError) as e:
        logger.error("store.unavailable", error=str(e.orig or e))
        raise StoreUnavailable("Store unavailable") from e


def parse_id(raw: Any, message: str = "Invalid ID") -> uuid.UUID:
    """Parse a record id, raising InvalidId when it is not a UUID."""
    if isinstance(raw, uuid.UUID):
        return raw
    try:
        return uuid.UUID(str(raw))
    except (ValueError, TypeError, AttributeError) as e:
        raise InvalidId(message) from e


class Store:
    """Base class: binds a session and runs statements through guarded()."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _all(self, stmt) -> list:
        result = await guarded(self.db.execute(stmt))
        return list(result.scalars().all())

    async def _first(self, stmt):
        result = await guarded(self.db.execute(stmt))
        return result.scalars().first()

    async def _scalar(self, stmt):
        result = await guarded(self.db.execute(stmt))
        return result.scalar_one()

    async def _rowcount(self, stmt) -> int:
        result = await guarded(self.db.execute(stmt))
        return result.rowcount

    async def _add(self, obj: T) -> T:
        self.db.add(obj)
        await guarded(self.db.flush())
        return obj
