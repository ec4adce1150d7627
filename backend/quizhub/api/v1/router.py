"""API v1 router - includes all v1 endpoints."""

from fastapi import APIRouter

from quizhub.api.v1.endpoints import categories, exams, health, permissions

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(health.router, prefix="", tags=["Health"])
api_router.include_router(categories.router, prefix="/categories", tags=["Categories"])
api_router.include_router(exams.router, prefix="/exams", tags=["Exams"])
api_router.include_router(permissions.router, prefix="/permissions", tags=["Permissions"])
