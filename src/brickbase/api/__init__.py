"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Paths are unprefixed; the web client calls /agreements,
/apartments/stats, ... directly. Auth is NOT applied per router here:
each route names the capability it needs (see auth/dependencies.py),
because open reads and gated writes share the same paths.
"""

from fastapi import APIRouter

from brickbase.api.agreements import router as agreements_router
from brickbase.api.building import router as building_router
from brickbase.api.health import router as health_router
from brickbase.api.payments import router as payments_router
from brickbase.api.users import router as users_router

api_router = APIRouter()

api_router.include_router(health_router, tags=["health"])
# agreements first: /apartments/stats must win over any /apartments/* route
api_router.include_router(agreements_router, tags=["agreements", "apartments"])
api_router.include_router(building_router, tags=["apartments", "announcements", "coupons"])
api_router.include_router(users_router, tags=["users"])
api_router.include_router(payments_router, tags=["payments"])
