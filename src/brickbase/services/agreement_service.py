"""Agreement service — the tenancy agreement lifecycle.

Learn: This is the CORE of the platform. An agreement moves through:

  pending → checked    (admin approval, optionally promoting the owner)
  pending → rejected   (admin denial)

checked and rejected are terminal. Two invariants hold after every write:
- one pending/checked agreement per email
- one checked agreement per apartment

The service checks both before writing, and the partial unique indexes on
the agreements table catch whatever a concurrent request slips past the
checks. Approval with role=member writes the agreement and the owner's
role through one UnitOfWork, so either both change or neither does.
"""

from typing import Optional

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from brickbase.db.models import (
    ACTIVE_STATUSES,
    ROLE_MEMBER,
    STATUS_CHECKED,
    STATUS_PENDING,
    STATUS_REJECTED,
    Agreement,
    utcnow,
)
from brickbase.db.unit_of_work import UnitOfWork
from brickbase.errors import (
    ApartmentOccupied,
    DuplicateAgreement,
    InvalidTransition,
    NotFound,
)
from brickbase.events.store import EventStore
from brickbase.events.types import (
    AGREEMENT_DECIDED,
    AGREEMENT_SUBMITTED,
    USER_ROLE_CHANGED,
)
from brickbase.services.occupancy import OccupancyIndex
from brickbase.stores.agreements import AgreementStore
from brickbase.stores.base import parse_id
from brickbase.stores.users import UserStore

logger = structlog.get_logger()


# ═══════════════════════════════════════════════════════════
# State Machine
# ═══════════════════════════════════════════════════════════

VALID_TRANSITIONS: dict[str, set[str]] = {
    STATUS_PENDING: {STATUS_CHECKED, STATUS_REJECTED},
    STATUS_CHECKED: set(),   # terminal
    STATUS_REJECTED: set(),  # terminal
}


# ═══════════════════════════════════════════════════════════
# Service
# ═══════════════════════════════════════════════════════════


class AgreementService:
    """Business logic for agreement submission, review and lookup."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.agreements = AgreementStore(db)
        self.users = UserStore(db)
        self.occupancy = OccupancyIndex(db)
        self.events = EventStore(db)
        self.uow = UnitOfWork(db)

    # ─── Submit ──────────────────────────────────────────

    async def submit(
        self,
        email: str,
        block_name: str,
        apartment_no: str,
        *,
        user_name: Optional[str] = None,
        floor_no: Optional[int] = None,
        rent: Optional[float] = None,
    ) -> Agreement:
        """Create a pending agreement for email.

        The status is always pending; callers cannot self-approve.
        """
        existing = await self.agreements.find_one(
            email=email, status=list(ACTIVE_STATUSES)
        )
        if existing:
            raise DuplicateAgreement()

        if await self.occupancy.is_occupied_by_member(block_name, apartment_no):
            raise ApartmentOccupied()

        agreement = Agreement(
            email=email,
            user_name=user_name,
            floor_no=floor_no,
            block_name=block_name,
            apartment_no=apartment_no,
            rent=rent,
            status=STATUS_PENDING,
        )

        async def record():
            return await self.events.append(
                stream_id=f"agreement:{agreement.id}",
                event_type=AGREEMENT_SUBMITTED,
                data={
                    "email": email,
                    "block_name": block_name,
                    "apartment_no": apartment_no,
                },
            )

        try:
            await self.uow.commit([lambda: self.agreements.insert(agreement), record])
        except IntegrityError as e:
            # Only the one-active-agreement-per-email index can fire on a
            # pending insert.
            raise DuplicateAgreement() from e

        logger.info(
            "agreement.submitted",
            agreement_id=str(agreement.id),
            email=email,
            apartment=agreement.apartment_key,
        )
        return agreement

    # ─── Decide ──────────────────────────────────────────

    async def decide(
        self,
        agreement_id: str,
        status: Optional[str] = None,
        role: Optional[str] = None,
        actor_email: Optional[str] = None,
    ) -> dict:
        """Apply an admin decision to a pending agreement.

        status defaults to "checked". role="member" together with a
        checked outcome stamps accepted_date and promotes the owner.
        """
        aid = parse_id(agreement_id, "Invalid agreement ID")
        agreement = await self.agreements.find_by_id(aid)
        if not agreement:
            raise NotFound("Agreement not found")

        new_status = status or STATUS_CHECKED
        old_status = agreement.status
        if new_status not in VALID_TRANSITIONS.get(old_status, set()):
            raise InvalidTransition(
                f"Cannot move agreement from '{old_status}' to '{new_status}'"
            )

        promote = role == ROLE_MEMBER and new_status == STATUS_CHECKED
        fields: dict = {"status": new_status}
        if promote:
            fields["accepted_date"] = utcnow()

        owner = agreement.email
        apartment = agreement.apartment_key
        meta = {"actor": actor_email} if actor_email else None

        async def transition():
            changed = await self.agreements.update_by_id(
                aid, expected_status=old_status, **fields
            )
            if not changed:
                # Another decision landed after our read
                raise InvalidTransition(
                    f"Agreement is no longer '{old_status}'; it was decided concurrently"
                )

        steps = [
            transition,
            lambda: self.events.append(
                stream_id=f"agreement:{aid}",
                event_type=AGREEMENT_DECIDED,
                data={"from": old_status, "to": new_status, "promoted": promote},
                metadata=meta,
            ),
        ]
        if promote:
            steps += [
                lambda: self.users.update_role(owner, ROLE_MEMBER),
                lambda: self.events.append(
                    stream_id=f"user:{owner}",
                    event_type=USER_ROLE_CHANGED,
                    data={"role": ROLE_MEMBER, "agreement_id": str(aid)},
                    metadata=meta,
                ),
            ]

        try:
            await self.uow.commit(steps)
        except IntegrityError as e:
            # Approval is the only write that can collide with the
            # one-checked-agreement-per-apartment index.
            logger.warning(
                "agreement.approval_blocked",
                agreement_id=str(aid),
                apartment=apartment,
                reason="apartment already has a checked agreement",
            )
            raise ApartmentOccupied() from e

        logger.info(
            "agreement.decided",
            agreement_id=str(aid),
            status=new_status,
            promoted=promote,
            actor=actor_email,
        )
        return {"message": "Agreement updated successfully"}

    # ─── Read ────────────────────────────────────────────

    async def get(self, agreement_id: str) -> Agreement:
        aid = parse_id(agreement_id, "Invalid agreement ID")
        agreement = await self.agreements.find_by_id(aid)
        if not agreement:
            raise NotFound("Agreement not found")
        return agreement

    async def get_active_for_email(self, email: str) -> Agreement:
        agreement = await self.agreements.find_one(email=email, status=STATUS_CHECKED)
        if not agreement:
            raise NotFound("No active agreement found")
        return agreement

    async def list_pending(self) -> list[Agreement]:
        return await self.agreements.find_many(status=STATUS_PENDING)
