"""API v1 routers."""

from fastapi import APIRouter

from .exhibits import router as exhibits_router
from .searches import router as searches_router

# Create v1 router that includes all v1 endpoints
router = APIRouter(prefix="/v1")

router.include_router(exhibits_router)
router.include_router(searches_router)

__all__ = ["router", "exhibits_router", "searches_router"]
