"""SQLAlchemy ORM models — single source of truth for the database schema.

Learn: Declarative ORM mapping with SQLAlchemy 2.0 style (Mapped[] + mapped_column).
Each class = one table. Alembic migrations mirror what is declared here.

Key concepts:
- UUID primary keys (generic Uuid type, native on PostgreSQL)
- JSON columns that become JSONB on PostgreSQL
- Partial unique indexes on agreements: the store itself guarantees one
  active agreement per email and one checked agreement per apartment,
  so concurrent submissions cannot slip past the service-level checks
- Apartment occupancy is NOT a column; it is derived from checked agreements
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    JSON,
    DateTime,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

JsonDict = JSON().with_variant(JSONB(), "postgresql")

# ─── Vocabulary ─────────────────────────────────────────

ROLE_USER = "user"
ROLE_MEMBER = "member"
ROLE_ADMIN = "admin"
ROLES = (ROLE_USER, ROLE_MEMBER, ROLE_ADMIN)

STATUS_PENDING = "pending"
STATUS_CHECKED = "checked"
STATUS_REJECTED = "rejected"
ACTIVE_STATUSES = (STATUS_PENDING, STATUS_CHECKED)

COUPON_AVAILABLE = "available"
COUPON_UNAVAILABLE = "unavailable"


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_uuid() -> uuid.UUID:
    return uuid.uuid4()


# ══════════════════════════════════════════════════════════════
# Residents and agreements
# ══════════════════════════════════════════════════════════════


class User(Base):
    """A resident account, created on first sign-in.

    Learn: Identity lives with the external provider; this row only
    carries the role that the access guard checks. Roles are disjoint
    tags (user, member, admin), not a ladder.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    photo_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ROLE_USER
    )  # user, member, admin
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )


class Agreement(Base):
    """A rental agreement request for one apartment.

    Learn: Lifecycle is pending → checked | rejected. The two partial
    unique indexes encode the occupancy invariants at the store level:
    - uq_agreements_active_email: one pending/checked agreement per email
    - uq_agreements_checked_apartment: one checked agreement per apartment
    """

    __tablename__ = "agreements"
    __table_args__ = (
        Index(
            "uq_agreements_active_email",
            "email",
            unique=True,
            postgresql_where=text("status IN ('pending', 'checked')"),
            sqlite_where=text("status IN ('pending', 'checked')"),
        ),
        Index(
            "uq_agreements_checked_apartment",
            "block_name",
            "apartment_no",
            unique=True,
            postgresql_where=text("status = 'checked'"),
            sqlite_where=text("status = 'checked'"),
        ),
        Index("idx_agreements_status", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    user_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    floor_no: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    block_name: Mapped[str] = mapped_column(String(50), nullable=False)
    apartment_no: Mapped[str] = mapped_column(String(20), nullable=False)
    rent: Mapped[Optional[float]] = mapped_column(
        Numeric(10, 2, asdecimal=False), nullable=True
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=STATUS_PENDING
    )  # pending, checked, rejected
    accepted_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )

    @property
    def apartment_key(self) -> str:
        return f"{self.block_name}-{self.apartment_no}"


class Apartment(Base):
    """An apartment listing. Availability is computed, never stored."""

    __tablename__ = "apartments"
    __table_args__ = (
        UniqueConstraint("block_name", "apartment_no", name="uq_apartments_block_no"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    image: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    floor_no: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    block_name: Mapped[str] = mapped_column(String(50), nullable=False)
    apartment_no: Mapped[str] = mapped_column(String(20), nullable=False)
    rent: Mapped[Optional[float]] = mapped_column(
        Numeric(10, 2, asdecimal=False), nullable=True
    )

    @property
    def apartment_key(self) -> str:
        return f"{self.block_name}-{self.apartment_no}"


# ══════════════════════════════════════════════════════════════
# Building content: announcements, coupons, payments
# ══════════════════════════════════════════════════════════════


class Announcement(Base):
    __tablename__ = "announcements"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )


class Coupon(Base):
    """A discount code members can apply to a rent payment."""

    __tablename__ = "coupons"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    code: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    discount: Mapped[float] = mapped_column(
        Numeric(5, 2, asdecimal=False), nullable=False
    )  # percentage
    description: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=COUPON_AVAILABLE
    )  # available, unavailable
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )


class Payment(Base):
    """A recorded rent payment. Settlement happens at the payment provider."""

    __tablename__ = "payments"
    __table_args__ = (
        Index("idx_payments_email_date", "email", "payment_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    month: Mapped[str] = mapped_column(String(20), nullable=False)
    rent: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False)
    amount_paid: Mapped[Optional[float]] = mapped_column(
        Numeric(10, 2, asdecimal=False), nullable=True
    )
    coupon_code: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    transaction_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    block_name: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    apartment_no: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    payment_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )


# ══════════════════════════════════════════════════════════════
# Audit trail
# ══════════════════════════════════════════════════════════════


class Event(Base):
    """Append-only audit log of lifecycle transitions and role changes.

    stream_id examples: "agreement:<uuid>", "user:alice@example.com"
    type examples: "agreement.submitted", "agreement.decided", "user.role_changed"
    """

    __tablename__ = "events"
    __table_args__ = (
        Index("idx_events_stream", "stream_id", "id"),
        Index("idx_events_type", "type"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    stream_id: Mapped[str] = mapped_column(String(300), nullable=False)
    type: Mapped[str] = mapped_column(String(100), nullable=False)
    data: Mapped[dict] = mapped_column(JsonDict, nullable=False)
    meta: Mapped[dict] = mapped_column(
        "metadata", JsonDict, nullable=False, default=dict
    )  # actor email, request id
    # Python attr is "meta" because "metadata" is reserved by SQLAlchemy.
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
