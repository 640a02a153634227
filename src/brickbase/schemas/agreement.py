"""Pydantic schemas for agreements and apartment occupancy."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from brickbase.schemas.base import CamelModel


class AgreementCreate(CamelModel):
    """Submission body. Any status the client sends is ignored."""

    email: Optional[str] = None
    user_name: Optional[str] = None
    floor_no: Optional[int] = None
    block_name: str = Field(..., min_length=1, max_length=50)
    apartment_no: str = Field(..., min_length=1, max_length=20)
    rent: Optional[float] = None

    @field_validator("apartment_no", mode="before")
    @classmethod
    def _apartment_no_as_text(cls, v):
        return str(v) if isinstance(v, int) else v


class AgreementDecision(CamelModel):
    """Admin decision. Any known role is accepted; only "member" promotes."""

    status: Optional[str] = Field(default=None, pattern=r"^(checked|rejected)$")
    role: Optional[str] = Field(default=None, pattern=r"^(user|member|admin)$")


class AgreementRead(CamelModel):
    id: uuid.UUID
    email: str
    user_name: Optional[str] = None
    floor_no: Optional[int] = None
    block_name: str
    apartment_no: str
    rent: Optional[float] = None
    status: str
    accepted_date: Optional[datetime] = None
    created_at: Optional[datetime] = None


class MessageResponse(CamelModel):
    message: str


class ApartmentStatsRead(CamelModel):
    total: int
    available_percentage: float
    unavailable_percentage: float
