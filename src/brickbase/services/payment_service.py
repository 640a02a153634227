"""Payment service — rent payment records and payment intents.

Learn: Card handling and settlement belong to the payment provider
(Stripe). We ask it for a payment intent, hand the client secret to the
browser, and record the payment once the client reports success. No
reconciliation happens here.
"""

from typing import Optional

import httpx
import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from brickbase.config import settings
from brickbase.db.models import Payment
from brickbase.db.unit_of_work import UnitOfWork
from brickbase.errors import PaymentProviderError
from brickbase.events.store import EventStore
from brickbase.events.types import PAYMENT_RECORDED
from brickbase.stores.base import Store

logger = structlog.get_logger()


class PaymentProvider:
    """Minimal Stripe REST client for creating card payment intents."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.stripe.com/v1",
        currency: str = "usd",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.currency = currency
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers={"Authorization": f"Bearer {self.api_key}"},
            transport=self._transport,
        )

    async def create_payment_intent(self, amount_in_cents: int) -> str:
        """Create a card payment intent and return its client secret."""
        form = {
            "amount": str(amount_in_cents),
            "currency": self.currency,
            "payment_method_types[]": "card",
        }
        try:
            async with self._client() as client:
                resp = await client.post("/payment_intents", data=form)
        except httpx.HTTPError as e:
            logger.error("payment.provider_unreachable", error=str(e))
            raise PaymentProviderError() from e

        if resp.status_code >= 400:
            try:
                message = resp.json().get("error", {}).get("message", "")
            except ValueError:
                message = ""
            logger.warning(
                "payment.intent_rejected", status=resp.status_code, error=message
            )
            raise PaymentProviderError(message or None)

        return resp.json()["client_secret"]


def build_payment_provider() -> PaymentProvider:
    return PaymentProvider(
        api_key=settings.payment_gateway_key,
        base_url=settings.payment_api_base,
        currency=settings.payment_currency,
        timeout=settings.payment_timeout_seconds,
    )


class PaymentService(Store):
    def __init__(self, db: AsyncSession):
        super().__init__(db)
        self.events = EventStore(db)
        self.uow = UnitOfWork(db)

    async def list_for_email(self, email: str) -> list[Payment]:
        """Payments for email, newest first."""
        return await self._all(
            select(Payment)
            .where(Payment.email == email)
            .order_by(Payment.payment_date.desc())
        )

    async def record(self, email: str, month: str, rent: float, **extra) -> Payment:
        payment = Payment(email=email, month=month, rent=rent, **extra)
        await self.uow.commit([
            lambda: self._add(payment),
            lambda: self.events.append(
                stream_id=f"payment:{payment.id}",
                event_type=PAYMENT_RECORDED,
                data={"email": email, "month": month, "rent": rent},
            ),
        ])
        logger.info("payment.recorded", email=email, month=month)
        return payment
