"""Payment API routes — member-only.

- GET  /payments?email=        → payment history, newest first
- POST /payments               → record a completed payment
- POST /create-payment-intent  → card payment intent at the provider
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from brickbase.auth.dependencies import require_member
from brickbase.db.engine import get_db
from brickbase.errors import PaymentProviderError
from brickbase.schemas.payment import (
    PaymentCreate,
    PaymentIntentCreate,
    PaymentIntentRead,
    PaymentRead,
)
from brickbase.services.payment_service import (
    PaymentProvider,
    PaymentService,
    build_payment_provider,
)

router = APIRouter(dependencies=[Depends(require_member)])


def _svc(db: AsyncSession = Depends(get_db)) -> PaymentService:
    return PaymentService(db)


def get_payment_provider() -> PaymentProvider:
    return build_payment_provider()


@router.get("/payments", response_model=list[PaymentRead])
async def list_payments(
    email: Optional[str] = Query(None),
    svc: PaymentService = Depends(_svc),
):
    if not email:
        raise HTTPException(status_code=400, detail="Missing email")
    return await svc.list_for_email(email)


@router.post("/payments", response_model=PaymentRead, status_code=201)
async def record_payment(body: PaymentCreate, svc: PaymentService = Depends(_svc)):
    if not body.email or not body.month or not body.rent:
        raise HTTPException(status_code=400, detail="Missing required fields")
    extra = body.model_dump(exclude={"email", "month", "rent"}, exclude_none=True)
    return await svc.record(body.email, body.month, body.rent, **extra)


@router.post("/create-payment-intent", response_model=PaymentIntentRead)
async def create_payment_intent(
    body: PaymentIntentCreate,
    provider: PaymentProvider = Depends(get_payment_provider),
):
    try:
        secret = await provider.create_payment_intent(body.amount_in_cents)
    except PaymentProviderError as e:
        raise e.to_http()
    return {"client_secret": secret}
