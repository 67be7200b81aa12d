"""API v1 router configuration."""

from fastapi import APIRouter

from api.v1.routes.handles import router as handles_router

router = APIRouter()
router.include_router(handles_router)
