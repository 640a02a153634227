"""initial schema: users, agreements, apartments, content, payments, events

Learn: The two partial unique indexes on agreements carry the occupancy
invariants into the database, so they hold even when two requests pass
the service-level checks at the same moment:
- uq_agreements_active_email: one pending/checked agreement per email
- uq_agreements_checked_apartment: one checked agreement per apartment

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "0001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSON = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    # ─── Residents ───────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("name", sa.String(100), nullable=True),
        sa.Column("photo_url", sa.Text(), nullable=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="user"),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now()
        ),
    )

    # ─── Agreements ──────────────────────────────────────
    op.create_table(
        "agreements",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("user_name", sa.String(100), nullable=True),
        sa.Column("floor_no", sa.Integer(), nullable=True),
        sa.Column("block_name", sa.String(50), nullable=False),
        sa.Column("apartment_no", sa.String(20), nullable=False),
        sa.Column("rent", sa.Numeric(10, 2), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("accepted_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now()
        ),
    )
    op.create_index(
        "uq_agreements_active_email",
        "agreements",
        ["email"],
        unique=True,
        postgresql_where=sa.text("status IN ('pending', 'checked')"),
        sqlite_where=sa.text("status IN ('pending', 'checked')"),
    )
    op.create_index(
        "uq_agreements_checked_apartment",
        "agreements",
        ["block_name", "apartment_no"],
        unique=True,
        postgresql_where=sa.text("status = 'checked'"),
        sqlite_where=sa.text("status = 'checked'"),
    )
    op.create_index("idx_agreements_status", "agreements", ["status"])

    # ─── Apartments ──────────────────────────────────────
    op.create_table(
        "apartments",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("image", sa.Text(), nullable=True),
        sa.Column("floor_no", sa.Integer(), nullable=True),
        sa.Column("block_name", sa.String(50), nullable=False),
        sa.Column("apartment_no", sa.String(20), nullable=False),
        sa.Column("rent", sa.Numeric(10, 2), nullable=True),
        sa.UniqueConstraint("block_name", "apartment_no", name="uq_apartments_block_no"),
    )

    # ─── Building content ────────────────────────────────
    op.create_table(
        "announcements",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("date", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_table(
        "coupons",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("code", sa.String(50), nullable=False, unique=True),
        sa.Column("discount", sa.Numeric(5, 2), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="available"),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now()
        ),
    )
    op.create_table(
        "payments",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("month", sa.String(20), nullable=False),
        sa.Column("rent", sa.Numeric(10, 2), nullable=False),
        sa.Column("amount_paid", sa.Numeric(10, 2), nullable=True),
        sa.Column("coupon_code", sa.String(50), nullable=True),
        sa.Column("transaction_id", sa.String(255), nullable=True),
        sa.Column("block_name", sa.String(50), nullable=True),
        sa.Column("apartment_no", sa.String(20), nullable=True),
        sa.Column(
            "payment_date", sa.DateTime(timezone=True), server_default=sa.func.now()
        ),
    )
    op.create_index("idx_payments_email_date", "payments", ["email", "payment_date"])

    # ─── Audit trail ─────────────────────────────────────
    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("stream_id", sa.String(300), nullable=False),
        sa.Column("type", sa.String(100), nullable=False),
        sa.Column("data", JSON, nullable=False),
        sa.Column("metadata", JSON, nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now()
        ),
    )
    op.create_index("idx_events_stream", "events", ["stream_id", "id"])
    op.create_index("idx_events_type", "events", ["type"])


def downgrade() -> None:
    op.drop_table("events")
    op.drop_table("payments")
    op.drop_table("coupons")
    op.drop_table("announcements")
    op.drop_table("apartments")
    op.drop_table("agreements")
    op.drop_table("users")
