"""Payment API tests — member-only history, recording and payment intents.

Learn: The payment provider is never called for real. The
get_payment_provider dependency is overridden with a PaymentProvider
whose httpx client runs on a MockTransport.
"""

import httpx
import pytest

from brickbase.api.payments import get_payment_provider
from brickbase.main import app
from brickbase.services.payment_service import PaymentProvider


@pytest.fixture
async def member(make_user):
    return await make_user("resident@example.com", "member")


def use_provider(handler):
    provider = PaymentProvider(api_key="sk_test_123", transport=httpx.MockTransport(handler))
    app.dependency_overrides[get_payment_provider] = lambda: provider


# ─── History ────────────────────────────────────────────


@pytest.mark.asyncio
async def test_record_and_list_payments(client, member):
    for month in ("January", "February"):
        r = await client.post(
            "/payments",
            json={
                "email": "resident@example.com",
                "month": month,
                "rent": 1500,
                "amountPaid": 1350,
                "couponCode": "SPRING10",
                "apartmentNo": 101,
            },
            headers=member,
        )
        assert r.status_code == 201
        assert r.json()["amountPaid"] == 1350
        assert r.json()["apartmentNo"] == "101"

    r = await client.get("/payments?email=resident@example.com", headers=member)
    assert r.status_code == 200
    assert {p["month"] for p in r.json()} == {"January", "February"}


@pytest.mark.asyncio
async def test_list_payments_requires_email(client, member):
    r = await client.get("/payments", headers=member)
    assert r.status_code == 400
    assert r.json()["detail"] == "Missing email"


@pytest.mark.asyncio
async def test_record_payment_missing_fields(client, member):
    r = await client.post("/payments", json={"email": "resident@example.com"}, headers=member)
    assert r.status_code == 400
    assert r.json()["detail"] == "Missing required fields"


@pytest.mark.asyncio
async def test_payments_reject_plain_user(client, make_user):
    user = await make_user("applicant@example.com", "user")
    r = await client.post(
        "/payments",
        json={"email": "applicant@example.com", "month": "May", "rent": 1},
        headers=user,
    )
    assert r.status_code == 403


# ─── Payment intents ────────────────────────────────────


@pytest.mark.asyncio
async def test_create_payment_intent(client, member):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = request.content.decode()
        return httpx.Response(200, json={"id": "pi_1", "client_secret": "pi_1_secret_abc"})

    use_provider(handler)
    r = await client.post(
        "/create-payment-intent", json={"amountInCents": 150000}, headers=member
    )
    assert r.status_code == 200
    assert r.json() == {"clientSecret": "pi_1_secret_abc"}
    assert seen["path"].endswith("/payment_intents")
    assert seen["auth"] == "Bearer sk_test_123"
    assert "amount=150000" in seen["body"]
    assert "currency=usd" in seen["body"]


@pytest.mark.asyncio
async def test_payment_intent_rejected_by_provider(client, member):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(402, json={"error": {"message": "Your card was declined."}})

    use_provider(handler)
    r = await client.post(
        "/create-payment-intent", json={"amountInCents": 100}, headers=member
    )
    assert r.status_code == 502
    assert r.json()["detail"] == "Your card was declined."


@pytest.mark.asyncio
async def test_payment_intent_provider_unreachable(client, member):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    use_provider(handler)
    r = await client.post(
        "/create-payment-intent", json={"amountInCents": 100}, headers=member
    )
    assert r.status_code == 502


@pytest.mark.asyncio
async def test_payment_intent_amount_must_be_positive(client, member):
    r = await client.post("/create-payment-intent", json={"amountInCents": 0}, headers=member)
    assert r.status_code == 422
