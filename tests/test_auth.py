"""Identity verification and capability gates.

Learn: Tests cover:
1. 401 when no credential is sent, 403 when a credential is rejected
2. Exact-match role gates (roles are not ranked)
3. Missing user record → 403
4. The identity verifier and role resolver on their own
"""

import uuid
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from brickbase.auth.dependencies import RoleResolver, require
from brickbase.auth.identity import (
    IdentityVerifier,
    JwtIdentityProvider,
    Principal,
)
from brickbase.config import settings
from brickbase.errors import Forbidden, Unauthenticated
from brickbase.stores.users import UserStore
from conftest import bearer

AGREEMENT = {"blockName": "A", "apartmentNo": "101", "floorNo": 1, "rent": 1200}


# ═══════════════════════════════════════════════════════════
# 401 vs 403
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_missing_header_is_401(client):
    r = await client.get("/agreements")
    assert r.status_code == 401
    assert r.json()["detail"] == "Unauthorized Access"


@pytest.mark.asyncio
async def test_header_without_token_is_401(client):
    r = await client.get("/agreements", headers={"Authorization": "Bearer "})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_non_bearer_scheme_is_401(client):
    r = await client.get("/agreements", headers={"Authorization": "Basic dXNlcjpwYXNz"})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_garbage_token_is_403(client):
    r = await client.get("/agreements", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 403
    assert r.json()["detail"] == "Forbidden Access"


@pytest.mark.asyncio
async def test_expired_token_is_403(client):
    r = await client.get("/agreements", headers=bearer("late@example.com", expires_minutes=-5))
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_wrong_signature_is_403(client):
    token = jwt.encode(
        {"email": "forger@example.com", "sub": "x"}, "some-other-secret", algorithm="HS256"
    )
    r = await client.get("/agreements", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_token_without_email_is_403(client):
    token = jwt.encode({"sub": "anon"}, settings.identity_secret, algorithm="HS256")
    r = await client.get("/agreements", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_valid_token_passes_authenticated_gate(client):
    """The authenticated gate needs no user record at all."""
    r = await client.get("/agreements", headers=bearer("stranger@example.com"))
    assert r.status_code == 200
    assert r.json() == []


# ═══════════════════════════════════════════════════════════
# Role gates
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_user_gate_rejects_unknown_user(client):
    r = await client.post("/agreements", json=AGREEMENT, headers=bearer("ghost@example.com"))
    assert r.status_code == 403
    assert r.json()["detail"] == "Only users can access this route"


@pytest.mark.asyncio
async def test_user_gate_rejects_admin(client, make_user):
    """Admins are not users — roles are disjoint tags."""
    headers = await make_user("boss@example.com", "admin")
    r = await client.post("/agreements", json=AGREEMENT, headers=headers)
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_admin_gate_rejects_member(client, make_user):
    headers = await make_user("resident@example.com", "member")
    r = await client.patch(f"/agreements/{uuid.uuid4()}", json={}, headers=headers)
    assert r.status_code == 403
    assert r.json()["detail"] == "Forbidden Access"


@pytest.mark.asyncio
async def test_member_gate_rejects_admin(client, make_user):
    headers = await make_user("boss@example.com", "admin")
    r = await client.get("/payments?email=boss@example.com", headers=headers)
    assert r.status_code == 403
    assert r.json()["detail"] == "Only members can access this route"


@pytest.mark.asyncio
async def test_member_gate_admits_member(client, make_user):
    headers = await make_user("resident@example.com", "member")
    r = await client.get("/payments?email=resident@example.com", headers=headers)
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_gate_without_credential_is_401_not_403(client):
    r = await client.patch(f"/agreements/{uuid.uuid4()}", json={})
    assert r.status_code == 401


def test_unknown_capability_rejected():
    with pytest.raises(ValueError):
        require("superuser")


# ═══════════════════════════════════════════════════════════
# Components
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_verifier_returns_principal():
    verifier = IdentityVerifier(JwtIdentityProvider(secret="s3cret"))
    token = jwt.encode(
        {
            "email": "a@example.com",
            "sub": "uid-1",
            "exp": datetime.now(timezone.utc) + timedelta(minutes=5),
        },
        "s3cret",
        algorithm="HS256",
    )
    principal = await verifier.verify(f"Bearer {token}")
    assert principal == Principal(email="a@example.com", subject="uid-1")
    assert principal.claims["sub"] == "uid-1"


@pytest.mark.asyncio
async def test_verifier_checks_audience():
    provider = JwtIdentityProvider(secret="s3cret", audience="brickbase-prod")
    verifier = IdentityVerifier(provider)
    token = jwt.encode(
        {"email": "a@example.com", "sub": "uid-1", "aud": "someone-else"},
        "s3cret",
        algorithm="HS256",
    )
    with pytest.raises(Forbidden):
        await verifier.verify(f"Bearer {token}")


@pytest.mark.asyncio
async def test_verifier_missing_header():
    verifier = IdentityVerifier(JwtIdentityProvider(secret="s3cret"))
    with pytest.raises(Unauthenticated):
        await verifier.verify(None)


@pytest.mark.asyncio
async def test_role_resolver(db_session, make_user):
    await make_user("m@example.com", "member")
    resolver = RoleResolver(UserStore(db_session))

    assert await resolver.resolve_role(Principal("m@example.com", "m")) == "member"
    assert await resolver.resolve_role(Principal("nobody@example.com", "n")) is None
