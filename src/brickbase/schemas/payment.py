"""Pydantic schemas for rent payments."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from brickbase.schemas.base import CamelModel


class PaymentCreate(CamelModel):
    """email, month and rent are required (400 otherwise)."""

    email: Optional[str] = None
    month: Optional[str] = None
    rent: Optional[float] = None
    amount_paid: Optional[float] = None
    coupon_code: Optional[str] = None
    transaction_id: Optional[str] = None
    block_name: Optional[str] = None
    apartment_no: Optional[str] = None

    @field_validator("apartment_no", mode="before")
    @classmethod
    def _apartment_no_as_text(cls, v):
        return str(v) if isinstance(v, int) else v


class PaymentRead(CamelModel):
    id: uuid.UUID
    email: str
    month: str
    rent: float
    amount_paid: Optional[float] = None
    coupon_code: Optional[str] = None
    transaction_id: Optional[str] = None
    block_name: Optional[str] = None
    apartment_no: Optional[str] = None
    payment_date: datetime


class PaymentIntentCreate(CamelModel):
    amount_in_cents: int = Field(..., gt=0)


class PaymentIntentRead(CamelModel):
    client_secret: str
