"""Pydantic schemas for apartments, announcements and coupons."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field

from brickbase.schemas.base import CamelModel


# ─── Apartments ─────────────────────────────────────────

class ApartmentRead(CamelModel):
    id: uuid.UUID
    image: Optional[str] = None
    floor_no: Optional[int] = None
    block_name: str
    apartment_no: str
    rent: Optional[float] = None


# ─── Announcements ──────────────────────────────────────

class AnnouncementCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""


class AnnouncementRead(CamelModel):
    id: uuid.UUID
    title: str
    description: str
    date: datetime


# ─── Coupons ────────────────────────────────────────────

class CouponCreate(CamelModel):
    """All three of code, discount and description are required (400 otherwise)."""

    code: Optional[str] = None
    discount: Optional[float] = None
    description: Optional[str] = None
    status: Optional[str] = Field(default=None, pattern=r"^(available|unavailable)$")


class CouponStatusUpdate(CamelModel):
    status: Optional[str] = None


class CouponRead(CamelModel):
    id: uuid.UUID
    code: str
    discount: float
    description: str
    status: str
    created_at: Optional[datetime] = None
