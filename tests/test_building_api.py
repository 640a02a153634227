"""Apartments, announcements and coupons."""

import uuid

import pytest

from brickbase.db.models import Coupon


@pytest.fixture
async def admin(make_user):
    return await make_user("admin@example.com", "admin")


COUPON = {"code": "SPRING10", "discount": 10, "description": "Spring discount"}


# ─── Apartments ─────────────────────────────────────────


@pytest.mark.asyncio
async def test_list_apartments_sorted(client, make_apartment):
    await make_apartment("B", "201", rent=1800)
    await make_apartment("A", "102")
    await make_apartment("A", "101", floor_no=1)

    r = await client.get("/apartments")
    assert r.status_code == 200
    keys = [(a["blockName"], a["apartmentNo"]) for a in r.json()]
    assert keys == [("A", "101"), ("A", "102"), ("B", "201")]
    assert r.json()[0]["floorNo"] == 1
    assert r.json()[2]["rent"] == 1800


# ─── Announcements ──────────────────────────────────────


@pytest.mark.asyncio
async def test_post_and_list_announcements(client, admin):
    r = await client.post(
        "/announcements",
        json={"title": "Water outage", "description": "Tuesday 9-12"},
        headers=admin,
    )
    assert r.status_code == 201
    assert r.json()["title"] == "Water outage"

    r = await client.get("/announcements")
    assert [a["title"] for a in r.json()] == ["Water outage"]


@pytest.mark.asyncio
async def test_post_announcement_requires_admin(client, make_user):
    member = await make_user("resident@example.com", "member")
    r = await client.post("/announcements", json={"title": "Hi"}, headers=member)
    assert r.status_code == 403


# ─── Coupons ────────────────────────────────────────────


@pytest.mark.asyncio
async def test_create_coupon(client, admin):
    r = await client.post("/coupons", json=COUPON, headers=admin)
    assert r.status_code == 201
    body = r.json()
    assert body["code"] == "SPRING10"
    assert body["discount"] == 10
    assert body["status"] == "available"

    r = await client.get("/coupons")
    assert [c["code"] for c in r.json()] == ["SPRING10"]


@pytest.mark.asyncio
async def test_create_coupon_missing_fields(client, admin):
    r = await client.post("/coupons", json={"code": "X"}, headers=admin)
    assert r.status_code == 400
    assert r.json()["detail"] == "All fields are required"


@pytest.mark.asyncio
async def test_create_coupon_duplicate_code(client, admin):
    await client.post("/coupons", json=COUPON, headers=admin)
    r = await client.post("/coupons", json=COUPON, headers=admin)
    assert r.status_code == 400
    assert r.json()["detail"] == "Coupon code already exists"


@pytest.mark.asyncio
async def test_coupon_status_change(client, admin, fetch):
    r = await client.post("/coupons", json=COUPON, headers=admin)
    coupon_id = r.json()["id"]

    r = await client.patch(
        f"/coupons/{coupon_id}/status", json={"status": "unavailable"}, headers=admin
    )
    assert r.status_code == 200
    assert r.json() == {"message": "Status updated successfully"}
    assert (await fetch(Coupon, code="SPRING10")).status == "unavailable"


@pytest.mark.asyncio
async def test_coupon_status_unchanged_is_404(client, admin):
    r = await client.post("/coupons", json=COUPON, headers=admin)
    r = await client.patch(
        f"/coupons/{r.json()['id']}/status", json={"status": "available"}, headers=admin
    )
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_coupon_status_invalid_value(client, admin):
    r = await client.patch(
        f"/coupons/{uuid.uuid4()}/status", json={"status": "expired"}, headers=admin
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "Invalid status"


@pytest.mark.asyncio
async def test_coupon_status_requires_admin(client, make_user):
    user = await make_user("someone@example.com", "user")
    r = await client.patch(
        f"/coupons/{uuid.uuid4()}/status", json={"status": "available"}, headers=user
    )
    assert r.status_code == 403
