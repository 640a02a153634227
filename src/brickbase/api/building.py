"""Apartment, announcement and coupon API routes.

Learn: Listings are open; every write requires the admin role.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from brickbase.auth.dependencies import require_admin
from brickbase.auth.identity import Principal
from brickbase.db.engine import get_db
from brickbase.db.models import COUPON_AVAILABLE, COUPON_UNAVAILABLE
from brickbase.errors import InvalidId, NotFound
from brickbase.schemas.agreement import MessageResponse
from brickbase.schemas.building import (
    AnnouncementCreate,
    AnnouncementRead,
    ApartmentRead,
    CouponCreate,
    CouponRead,
    CouponStatusUpdate,
)
from brickbase.services.building_service import BuildingService, DuplicateCoupon

router = APIRouter()


def _svc(db: AsyncSession = Depends(get_db)) -> BuildingService:
    return BuildingService(db)


# ─── Apartments ─────────────────────────────────────────

@router.get("/apartments", response_model=list[ApartmentRead])
async def list_apartments(svc: BuildingService = Depends(_svc)):
    return await svc.list_apartments()


# ─── Announcements ──────────────────────────────────────

@router.get("/announcements", response_model=list[AnnouncementRead])
async def list_announcements(svc: BuildingService = Depends(_svc)):
    return await svc.list_announcements()


@router.post("/announcements", response_model=AnnouncementRead, status_code=201)
async def post_announcement(
    body: AnnouncementCreate,
    principal: Principal = Depends(require_admin),
    svc: BuildingService = Depends(_svc),
):
    return await svc.post_announcement(
        title=body.title, description=body.description, actor_email=principal.email
    )


# ─── Coupons ────────────────────────────────────────────

@router.get("/coupons", response_model=list[CouponRead])
async def list_coupons(svc: BuildingService = Depends(_svc)):
    return await svc.list_coupons()


@router.post(
    "/coupons",
    response_model=CouponRead,
    status_code=201,
    dependencies=[Depends(require_admin)],
)
async def create_coupon(body: CouponCreate, svc: BuildingService = Depends(_svc)):
    if not body.code or not body.discount or not body.description:
        raise HTTPException(status_code=400, detail="All fields are required")
    try:
        return await svc.create_coupon(
            code=body.code,
            discount=body.discount,
            description=body.description,
            status=body.status,
        )
    except DuplicateCoupon as e:
        raise e.to_http()


@router.patch(
    "/coupons/{coupon_id}/status",
    response_model=MessageResponse,
    dependencies=[Depends(require_admin)],
)
async def update_coupon_status(
    coupon_id: str,
    body: CouponStatusUpdate,
    svc: BuildingService = Depends(_svc),
):
    if body.status not in (COUPON_AVAILABLE, COUPON_UNAVAILABLE):
        raise HTTPException(status_code=400, detail="Invalid status")
    try:
        await svc.set_coupon_status(coupon_id, body.status)
    except (InvalidId, NotFound) as e:
        raise e.to_http()
    return {"message": "Status updated successfully"}
