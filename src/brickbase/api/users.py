"""User API routes — sign-in registration, role lookup, admin role edits."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from brickbase.auth.dependencies import require_admin
from brickbase.auth.identity import Principal
from brickbase.db.engine import get_db
from brickbase.errors import InvalidId, NotFound
from brickbase.schemas.user import (
    RoleRead,
    RoleUpdate,
    UserCreate,
    UserRead,
    UserStatsRead,
)
from brickbase.services.user_service import UserService

router = APIRouter()


def _svc(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


@router.get("/users", response_model=list[UserRead])
async def list_users(
    role: Optional[str] = Query(None, pattern=r"^(user|member|admin)$"),
    svc: UserService = Depends(_svc),
):
    return await svc.list_users(role)


# Registered before /users/{email}/role so "stats" is not read as an email
@router.get("/users/stats", response_model=UserStatsRead)
async def user_stats(svc: UserService = Depends(_svc)):
    return await svc.stats()


@router.get("/users/{email}/role", response_model=RoleRead)
async def get_user_role(email: str, svc: UserService = Depends(_svc)):
    try:
        return {"role": await svc.get_role(email)}
    except NotFound as e:
        raise e.to_http()


@router.post("/users", response_model=UserRead, status_code=201)
async def register_user(body: UserCreate, svc: UserService = Depends(_svc)):
    """Called by the client on every sign-in. Existing users are left untouched."""
    user, created = await svc.register(
        email=body.email, name=body.name, photo_url=body.photo_url
    )
    if not created:
        return JSONResponse(status_code=200, content={"message": "User already exists"})
    return user


@router.patch("/users/{user_id}", response_model=UserRead)
async def update_user_role(
    user_id: str,
    body: RoleUpdate,
    principal: Principal = Depends(require_admin),
    svc: UserService = Depends(_svc),
):
    try:
        return await svc.set_role(user_id, body.role, actor_email=principal.email)
    except (InvalidId, NotFound) as e:
        raise e.to_http()
