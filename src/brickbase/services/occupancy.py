"""Occupancy index — which apartments are taken, derived on demand.

Learn: There is no "occupied" column on apartments. An apartment is
occupied iff a checked agreement names its (block, apartment) pair, so
availability is recomputed from the agreements every time and the two
tables can never drift apart.

compute_stats() is a pure function over a snapshot; OccupancyIndex loads
the snapshot from the stores.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from brickbase.db.models import ROLE_MEMBER, STATUS_CHECKED, Apartment
from brickbase.stores.agreements import AgreementStore
from brickbase.stores.base import guarded
from brickbase.stores.users import UserStore


@dataclass(frozen=True)
class ApartmentStats:
    total: int
    available_percentage: float
    unavailable_percentage: float


def apartment_key(block_name: str, apartment_no) -> str:
    return f"{block_name}-{apartment_no}"


def occupied_keys(agreements: Iterable) -> set[str]:
    """Keys of apartments held by a checked agreement."""
    return {
        apartment_key(a.block_name, a.apartment_no)
        for a in agreements
        if a.status == STATUS_CHECKED
    }


def _percentage(part: int, total: int) -> float:
    if not total:
        return 0
    return round(part / total * 100, 2)


def compute_stats(apartments: Iterable, checked_agreements: Iterable) -> ApartmentStats:
    apartments = list(apartments)
    occupied = occupied_keys(checked_agreements)
    total = len(apartments)
    unavailable = sum(
        1 for ap in apartments if apartment_key(ap.block_name, ap.apartment_no) in occupied
    )
    available = total - unavailable
    return ApartmentStats(
        total=total,
        available_percentage=_percentage(available, total),
        unavailable_percentage=_percentage(unavailable, total),
    )


class OccupancyIndex:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.agreements = AgreementStore(db)
        self.users = UserStore(db)

    async def stats(self) -> ApartmentStats:
        result = await guarded(self.db.execute(select(Apartment)))
        apartments = result.scalars().all()
        checked = await self.agreements.find_many(status=STATUS_CHECKED)
        return compute_stats(apartments, checked)

    async def is_occupied_by_member(self, block_name: str, apartment_no: str) -> bool:
        """True if a checked agreement for the apartment belongs to a member.

        A checked agreement whose owner never got the member role does not
        count; the owner's current role is the deciding fact.
        """
        checked = await self.agreements.find_many(
            block_name=block_name,
            apartment_no=apartment_no,
            status=STATUS_CHECKED,
        )
        if not checked:
            return False
        emails = [a.email for a in checked]
        return await self.users.find_with_role(emails, ROLE_MEMBER) is not None
