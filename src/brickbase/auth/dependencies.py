"""FastAPI auth dependencies — the access guard.

Learn: These are used as Depends() in route handlers. require(capability)
builds a gate:

- "authenticated" → any verified principal
- "user" / "member" / "admin" → verified principal whose stored role is
  exactly that capability

Roles are disjoint tags, not a ranking: an admin does NOT pass a
member-only gate.
"""

from functools import lru_cache
from typing import Optional

import structlog
from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from brickbase.auth.identity import IdentityVerifier, Principal, build_identity_verifier
from brickbase.db.engine import get_db
from brickbase.db.models import ROLE_ADMIN, ROLE_MEMBER, ROLE_USER, ROLES
from brickbase.errors import Forbidden, Unauthenticated
from brickbase.stores.users import UserStore

logger = structlog.get_logger()

AUTHENTICATED = "authenticated"

DENIAL_MESSAGES = {
    ROLE_USER: "Only users can access this route",
    ROLE_MEMBER: "Only members can access this route",
    ROLE_ADMIN: "Forbidden Access",
}


@lru_cache
def get_identity_verifier() -> IdentityVerifier:
    return build_identity_verifier()


async def get_principal(
    authorization: Optional[str] = Header(None),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> Principal:
    """Verified principal (required — 401 without a credential, 403 if rejected)."""
    try:
        return await verifier.verify(authorization)
    except (Unauthenticated, Forbidden) as e:
        raise e.to_http()


class RoleResolver:
    """Looks up a principal's role. No user row → None, not an error."""

    def __init__(self, users: UserStore):
        self.users = users

    async def resolve_role(self, principal: Principal) -> Optional[str]:
        user = await self.users.find_by_email(principal.email)
        return user.role if user else None


def require(capability: str):
    """Build a dependency that admits only principals with capability."""
    if capability == AUTHENTICATED:
        return get_principal
    if capability not in ROLES:
        raise ValueError(f"Unknown capability: {capability}")

    async def guard(
        principal: Principal = Depends(get_principal),
        db: AsyncSession = Depends(get_db),
    ) -> Principal:
        role = await RoleResolver(UserStore(db)).resolve_role(principal)
        if role != capability:
            logger.info(
                "access.denied",
                email=principal.email,
                required=capability,
                role=role,
            )
            raise Forbidden(DENIAL_MESSAGES[capability]).to_http()
        return principal

    guard.__name__ = f"require_{capability}"
    return guard


# Prebuilt gates: one function object each so FastAPI caches them per request
require_authenticated = require(AUTHENTICATED)
require_user = require(ROLE_USER)
require_member = require(ROLE_MEMBER)
require_admin = require(ROLE_ADMIN)
