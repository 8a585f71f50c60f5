"""Master API router — mounts all endpoint routers."""

from __future__ import annotations

from fastapi import APIRouter

from bimisvg.api import convert, health, validate

api_router = APIRouter(prefix="/api")

api_router.include_router(health.router)
api_router.include_router(convert.router)
api_router.include_router(validate.router)
