"""
API routers, mounted under ``AppSettings.api_prefix``.
"""

from fastapi import APIRouter

from . import admin, applications, health, pets, promotions, rescue_requests, rescues, users

api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(pets.router)
api_router.include_router(users.router)
api_router.include_router(applications.router)
api_router.include_router(rescues.router)
api_router.include_router(rescue_requests.router)
api_router.include_router(promotions.router)
api_router.include_router(admin.router)

__all__ = ["api_router"]
