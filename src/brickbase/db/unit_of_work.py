"""Unit of work — dependent writes committed as one transaction.

Learn: Approving an agreement touches two tables (agreement status and the
owner's role). Issuing them as two independent commits leaves a window
where a crash violates "checked ⇒ member". commit(steps) runs every step
on the request's session and commits once; if any step (or the commit)
fails, everything is rolled back and the error propagates.
"""

from collections.abc import Awaitable, Callable, Sequence
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from brickbase.stores.base import guarded

logger = structlog.get_logger()

Operation = Callable[[], Awaitable[Any]]


class UnitOfWork:
    """Runs a list of store operations inside the session's transaction."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def commit(self, steps: Sequence[Operation]) -> list[Any]:
        """Run steps in order, then commit. Returns each step's result."""
        results = []
        try:
            for step in steps:
                results.append(await step())
            await guarded(self.db.commit())
        except Exception:
            logger.warning("unit_of_work.rolled_back", completed_steps=len(results))
            await self.db.rollback()
            raise
        return results
