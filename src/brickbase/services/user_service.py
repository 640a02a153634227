"""User service — sign-in registration, role lookup and admin role edits."""

from typing import Optional

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from brickbase.db.models import ROLE_MEMBER, ROLE_USER, User
from brickbase.db.unit_of_work import UnitOfWork
from brickbase.errors import NotFound
from brickbase.events.store import EventStore
from brickbase.events.types import USER_CREATED, USER_ROLE_CHANGED
from brickbase.stores.base import parse_id
from brickbase.stores.users import UserStore

logger = structlog.get_logger()


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.users = UserStore(db)
        self.events = EventStore(db)
        self.uow = UnitOfWork(db)

    async def register(
        self,
        email: str,
        name: Optional[str] = None,
        photo_url: Optional[str] = None,
    ) -> tuple[User, bool]:
        """Create the user on first sign-in. Re-registering is a no-op.

        New accounts always start with the "user" role.
        """
        user = User(email=email, name=name, photo_url=photo_url, role=ROLE_USER)
        created = False

        async def insert():
            nonlocal user, created
            user, created = await self.users.insert_if_absent(user)
            if created:
                await self.events.append(
                    stream_id=f"user:{email}",
                    event_type=USER_CREATED,
                    data={"role": ROLE_USER},
                )

        try:
            await self.uow.commit([insert])
        except IntegrityError:
            # Lost a race with a concurrent sign-in for the same email
            existing = await self.users.find_by_email(email)
            if existing is None:
                raise
            return existing, False

        if created:
            logger.info("user.created", email=email)
        return user, created

    async def get_role(self, email: str) -> str:
        user = await self.users.find_by_email(email)
        if not user:
            raise NotFound("User not found")
        return user.role

    async def list_users(self, role: Optional[str] = None) -> list[User]:
        return await self.users.list_by_role(role)

    async def stats(self) -> dict:
        return {
            "total_users": await self.users.count_all(),
            "total_members": await self.users.count_by_role(ROLE_MEMBER),
        }

    async def set_role(
        self, user_id: str, role: str, actor_email: Optional[str] = None
    ) -> User:
        """Admin action: overwrite a user's role."""
        uid = parse_id(user_id, "Invalid user ID")
        user = await self.users.find_by_id(uid)
        if not user:
            raise NotFound("User not found")

        old_role = user.role
        await self.uow.commit([
            lambda: self.users.update_role_by_id(uid, role),
            lambda: self.events.append(
                stream_id=f"user:{user.email}",
                event_type=USER_ROLE_CHANGED,
                data={"from": old_role, "role": role},
                metadata={"actor": actor_email} if actor_email else None,
            ),
        ])
        logger.info(
            "user.role_changed", email=user.email, role=role, actor=actor_email
        )
        return user

    async def grant_role(self, email: str, role: str) -> User:
        """Set a role by email, creating the user if needed (CLI bootstrap)."""
        user, _ = await self.register(email)
        return await self.set_role(str(user.id), role)
