"""Agreement record store.

Learn: find_one/find_many take keyword filters named after model columns.
A list/tuple/set value becomes an IN clause, anything else an equality:

    await store.find_one(email="a@b.c", status=["pending", "checked"])
"""

import uuid
from typing import Any, Optional

from sqlalchemy import select, update

from brickbase.db.models import Agreement
from brickbase.stores.base import Store


def _where(query, filters: dict[str, Any]):
    for name, value in filters.items():
        column = getattr(Agreement, name)
        if isinstance(value, (list, tuple, set, frozenset)):
            query = query.where(column.in_(list(value)))
        else:
            query = query.where(column == value)
    return query


class AgreementStore(Store):
    """Reads and writes agreement rows."""

    async def find_by_id(self, agreement_id: uuid.UUID) -> Optional[Agreement]:
        return await self._first(select(Agreement).where(Agreement.id == agreement_id))

    async def find_one(self, **filters: Any) -> Optional[Agreement]:
        return await self._first(
            _where(select(Agreement), filters).order_by(Agreement.created_at).limit(1)
        )

    async def find_many(self, **filters: Any) -> list[Agreement]:
        return await self._all(
            _where(select(Agreement), filters).order_by(Agreement.created_at)
        )

    async def insert(self, agreement: Agreement) -> Agreement:
        return await self._add(agreement)

    async def update_by_id(
        self,
        agreement_id: uuid.UUID,
        *,
        expected_status: Optional[str] = None,
        **fields: Any,
    ) -> int:
        """Set fields on one agreement. Returns the number of rows changed.

        With expected_status, the row only changes if it still has that
        status (compare-and-set), so a decision made from a stale read
        changes nothing. Constraint errors surface here.
        """
        stmt = update(Agreement).where(Agreement.id == agreement_id)
        if expected_status is not None:
            stmt = stmt.where(Agreement.status == expected_status)
        return await self._rowcount(stmt.values(**fields))
