"""User record store."""

import uuid
from typing import Optional

from sqlalchemy import func, select, update

from brickbase.db.models import User
from brickbase.stores.base import Store


class UserStore(Store):
    """Reads and writes user rows. The email is the natural key."""

    async def find_by_email(self, email: str) -> Optional[User]:
        return await self._first(select(User).where(User.email == email))

    async def find_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        return await self._first(select(User).where(User.id == user_id))

    async def find_with_role(self, emails: list[str], role: str) -> Optional[User]:
        """First user among emails who currently holds role."""
        if not emails:
            return None
        return await self._first(
            select(User).where(User.email.in_(emails), User.role == role)
        )

    async def insert_if_absent(self, user: User) -> tuple[User, bool]:
        """Insert user unless the email exists. Returns (row, created)."""
        existing = await self.find_by_email(user.email)
        if existing:
            return existing, False
        return await self._add(user), True

    async def update_role(self, email: str, role: str) -> int:
        return await self._rowcount(
            update(User).where(User.email == email).values(role=role)
        )

    async def update_role_by_id(self, user_id: uuid.UUID, role: str) -> int:
        return await self._rowcount(
            update(User).where(User.id == user_id).values(role=role)
        )

    async def list_by_role(self, role: Optional[str] = None) -> list[User]:
        query = select(User).order_by(User.created_at)
        if role:
            query = query.where(User.role == role)
        return await self._all(query)

    async def count_all(self) -> int:
        return await self._scalar(select(func.count()).select_from(User))

    async def count_by_role(self, role: str) -> int:
        return await self._scalar(
            select(func.count()).select_from(User).where(User.role == role)
        )
