"""Composition of API routers."""

from __future__ import annotations

from fastapi import APIRouter

from compeek.api.comments import router as comments_router
from compeek.api.diff import router as diff_router
from compeek.api.health import router as health_router
from compeek.api.spa import router as spa_router

api_router = APIRouter(prefix="/api")
api_router.include_router(diff_router)
api_router.include_router(comments_router)
api_router.include_router(health_router)

root_router = APIRouter()
root_router.include_router(spa_router)
