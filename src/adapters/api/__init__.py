"""API router configuration.

Mounted under ``API_PREFIX``; every route here has passed through the request gate.
"""

from fastapi import APIRouter

from .admin import router as admin_router
from .health import router as health_router
from .session import router as session_router
from .users import router as users_router

api_router = APIRouter()

api_router.include_router(health_router, prefix="/health", tags=["health"])
api_router.include_router(session_router, prefix="/auth", tags=["auth"])
api_router.include_router(users_router, prefix="/users", tags=["users"])
api_router.include_router(admin_router, prefix="/admin", tags=["admin"])
