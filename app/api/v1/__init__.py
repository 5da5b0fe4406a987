"""API v1 routes."""

from fastapi import APIRouter

from app.api.v1 import auth, dashboards, health, profile, profile_requests

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, tags=["auth"])
router.include_router(profile.router, tags=["profile"])
router.include_router(profile_requests.router, prefix="/profile-requests", tags=["profile-requests"])
router.include_router(dashboards.router, tags=["dashboards"])
