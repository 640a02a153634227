"""Test fixtures — a fresh SQLite database per test, real auth tokens.

Learn: Each test gets its own database file (aiosqlite) with the full
schema, including the partial unique indexes on agreements. The app's
get_db dependency is overridden to hand out sessions on that database,
so every request gets its own session exactly as in production.

Auth is NOT mocked: tests mint HS256 ID tokens with the development
secret and send them as Bearer headers, so the identity verifier and the
role gates run for real.
"""

import os
import tempfile
import uuid

# Must be set before brickbase is imported; the module-level engine reads it.
os.environ.setdefault(
    "BRICKBASE_DATABASE_URL",
    f"sqlite+aiosqlite:///{tempfile.gettempdir()}/brickbase-test-{uuid.uuid4().hex[:8]}.db",
)

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from brickbase.auth.identity import issue_dev_token
from brickbase.db.engine import get_db
from brickbase.db.models import Agreement, Apartment, Base, User
from brickbase.main import app


def bearer(email: str, **kwargs) -> dict:
    """Authorization header carrying a freshly minted ID token."""
    return {"Authorization": f"Bearer {issue_dev_token(email, **kwargs)}"}


@pytest_asyncio.fixture()
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture()
async def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture()
async def db_session(session_factory):
    """A standalone session for service-level tests."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture()
async def client(session_factory):
    """HTTP client whose requests run against the per-test database."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ═══════════════════════════════════════════════════════════
# Seeding helpers
# ═══════════════════════════════════════════════════════════


@pytest_asyncio.fixture()
async def make_user(session_factory):
    """Create a user with a role; returns an auth header for them."""

    async def _make(email: str, role: str = "user") -> dict:
        async with session_factory() as s:
            s.add(User(email=email, role=role))
            await s.commit()
        return bearer(email)

    return _make


@pytest_asyncio.fixture()
async def make_apartment(session_factory):
    async def _make(block_name: str, apartment_no: str, **fields) -> Apartment:
        async with session_factory() as s:
            apartment = Apartment(block_name=block_name, apartment_no=apartment_no, **fields)
            s.add(apartment)
            await s.commit()
        return apartment

    return _make


@pytest_asyncio.fixture()
async def make_agreement(session_factory):
    """Insert an agreement row directly, bypassing the lifecycle checks."""

    async def _make(email: str, block_name: str, apartment_no: str, status: str = "pending") -> Agreement:
        async with session_factory() as s:
            agreement = Agreement(
                email=email,
                block_name=block_name,
                apartment_no=apartment_no,
                status=status,
            )
            s.add(agreement)
            await s.commit()
        return agreement

    return _make


@pytest_asyncio.fixture()
async def fetch(session_factory):
    """Read a row back in a fresh session: await fetch(User, email="...")."""
    from sqlalchemy import select

    async def _fetch(model, **filters):
        async with session_factory() as s:
            result = await s.execute(select(model).filter_by(**filters))
            return result.scalars().first()

    return _fetch
