"""API route registration."""

from fastapi import APIRouter

from classic_static.api.routes import health

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
