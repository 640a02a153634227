"""Pydantic schemas for users."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field

from brickbase.schemas.base import CamelModel


class UserCreate(CamelModel):
    email: str = Field(..., min_length=3, max_length=255)
    name: Optional[str] = Field(default=None, max_length=100)
    photo_url: Optional[str] = None


class UserRead(CamelModel):
    id: uuid.UUID
    email: str
    name: Optional[str] = None
    photo_url: Optional[str] = None
    role: str
    created_at: Optional[datetime] = None


class RoleUpdate(CamelModel):
    role: str = Field(..., pattern=r"^(user|member|admin)$")


class RoleRead(CamelModel):
    role: str


class UserStatsRead(CamelModel):
    total_users: int
    total_members: int
