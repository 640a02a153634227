"""Agreement and apartment-occupancy API routes.

Learn: Routes handle HTTP concerns (status codes, error responses) and
delegate to AgreementService / OccupancyIndex. Service errors carry
their own status code and are turned into HTTPException with to_http().

- GET   /agreements          → ?email= active agreement, else pending queue
- GET   /agreements/{id}     → one agreement (open)
- POST  /agreements          → submit (user role)
- PATCH /agreements/{id}     → approve / reject (admin role)
- GET   /apartments/stats    → availability percentages (open)
"""

from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from brickbase.auth.dependencies import require_admin, require_authenticated, require_user
from brickbase.auth.identity import Principal
from brickbase.db.engine import get_db
from brickbase.errors import (
    ApartmentOccupied,
    DuplicateAgreement,
    InvalidId,
    InvalidTransition,
    NotFound,
)
from brickbase.schemas.agreement import (
    AgreementCreate,
    AgreementDecision,
    AgreementRead,
    ApartmentStatsRead,
    MessageResponse,
)
from brickbase.services.agreement_service import AgreementService
from brickbase.services.occupancy import OccupancyIndex

router = APIRouter()


def _svc(db: AsyncSession = Depends(get_db)) -> AgreementService:
    return AgreementService(db)


# ─── Agreements ─────────────────────────────────────────

@router.get("/agreements")
async def list_agreements(
    email: Optional[str] = Query(None),
    principal: Principal = Depends(require_authenticated),
    svc: AgreementService = Depends(_svc),
):
    """With ?email=, that user's checked agreement; otherwise every pending one."""
    if email:
        try:
            agreement = await svc.get_active_for_email(email)
        except NotFound as e:
            raise e.to_http()
        return AgreementRead.model_validate(agreement)

    return [AgreementRead.model_validate(a) for a in await svc.list_pending()]


@router.get("/agreements/{agreement_id}", response_model=AgreementRead)
async def get_agreement(agreement_id: str, svc: AgreementService = Depends(_svc)):
    try:
        return await svc.get(agreement_id)
    except (InvalidId, NotFound) as e:
        raise e.to_http()


@router.post("/agreements", response_model=AgreementRead, status_code=201)
async def submit_agreement(
    body: AgreementCreate,
    principal: Principal = Depends(require_user),
    svc: AgreementService = Depends(_svc),
):
    """Submit a rental request. Always stored as pending."""
    if body.email and body.email != principal.email:
        raise HTTPException(
            status_code=403, detail="Cannot submit an agreement for another user"
        )
    try:
        return await svc.submit(
            email=principal.email,
            block_name=body.block_name,
            apartment_no=body.apartment_no,
            user_name=body.user_name,
            floor_no=body.floor_no,
            rent=body.rent,
        )
    except (DuplicateAgreement, ApartmentOccupied) as e:
        raise e.to_http()


@router.patch("/agreements/{agreement_id}", response_model=MessageResponse)
async def decide_agreement(
    agreement_id: str,
    body: Optional[AgreementDecision] = None,
    principal: Principal = Depends(require_admin),
    svc: AgreementService = Depends(_svc),
):
    """Approve or reject. Omitting status approves; role=member promotes the owner."""
    body = body or AgreementDecision()
    try:
        return await svc.decide(
            agreement_id,
            status=body.status,
            role=body.role,
            actor_email=principal.email,
        )
    except (InvalidId, NotFound, InvalidTransition, ApartmentOccupied) as e:
        raise e.to_http()


# ─── Occupancy ──────────────────────────────────────────

@router.get("/apartments/stats", response_model=ApartmentStatsRead)
async def apartment_stats(db: AsyncSession = Depends(get_db)):
    stats = await OccupancyIndex(db).stats()
    return ApartmentStatsRead(**asdict(stats))
