"""Building service — apartments, announcements and coupons.

Learn: Plain persistence with no cross-entity rules. Apartment
availability is not handled here; see services/occupancy.py.
"""

from typing import Optional

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from brickbase.db.models import (
    COUPON_AVAILABLE,
    Announcement,
    Apartment,
    Coupon,
)
from brickbase.db.unit_of_work import UnitOfWork
from brickbase.errors import BrickBaseError, NotFound
from brickbase.events.store import EventStore
from brickbase.events.types import (
    ANNOUNCEMENT_POSTED,
    COUPON_CREATED,
    COUPON_STATUS_CHANGED,
)
from brickbase.stores.base import Store, parse_id

logger = structlog.get_logger()


class DuplicateCoupon(BrickBaseError):
    status_code = 400
    default_message = "Coupon code already exists"


class BuildingService(Store):
    """Business logic for apartments, announcements and coupons."""

    def __init__(self, db: AsyncSession):
        super().__init__(db)
        self.events = EventStore(db)
        self.uow = UnitOfWork(db)

    # ─── Apartments ─────────────────────────────────────

    async def list_apartments(self) -> list[Apartment]:
        return await self._all(
            select(Apartment).order_by(Apartment.block_name, Apartment.apartment_no)
        )

    # ─── Announcements ──────────────────────────────────

    async def list_announcements(self) -> list[Announcement]:
        return await self._all(select(Announcement).order_by(Announcement.date.desc()))

    async def post_announcement(
        self, title: str, description: str, actor_email: Optional[str] = None
    ) -> Announcement:
        announcement = Announcement(title=title, description=description)
        await self.uow.commit([
            lambda: self._add(announcement),
            lambda: self.events.append(
                stream_id=f"announcement:{announcement.id}",
                event_type=ANNOUNCEMENT_POSTED,
                data={"title": title},
                metadata={"actor": actor_email} if actor_email else None,
            ),
        ])
        logger.info("announcement.posted", announcement_id=str(announcement.id))
        return announcement

    # ─── Coupons ────────────────────────────────────────

    async def list_coupons(self) -> list[Coupon]:
        return await self._all(select(Coupon).order_by(Coupon.created_at.desc()))

    async def create_coupon(
        self,
        code: str,
        discount: float,
        description: str,
        status: Optional[str] = None,
    ) -> Coupon:
        existing = await self._first(select(Coupon).where(Coupon.code == code))
        if existing:
            raise DuplicateCoupon()

        coupon = Coupon(
            code=code,
            discount=float(discount),
            description=description,
            status=status or COUPON_AVAILABLE,
        )
        await self.uow.commit([
            lambda: self._add(coupon),
            lambda: self.events.append(
                stream_id=f"coupon:{coupon.id}",
                event_type=COUPON_CREATED,
                data={"discount": coupon.discount, "status": coupon.status},
            ),
        ])
        logger.info("coupon.created", code=code)
        return coupon

    async def set_coupon_status(self, coupon_id: str, status: str) -> None:
        """Change a coupon's status. NotFound if missing or already in status."""
        cid = parse_id(coupon_id, "Invalid coupon ID")

        async def apply():
            count = await self._rowcount(
                update(Coupon)
                .where(Coupon.id == cid, Coupon.status != status)
                .values(status=status)
            )
            if count == 0:
                raise NotFound("Coupon not found or status unchanged")
            await self.events.append(
                stream_id=f"coupon:{cid}",
                event_type=COUPON_STATUS_CHANGED,
                data={"status": status},
            )

        await self.uow.commit([apply])
