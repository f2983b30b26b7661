from fastapi import APIRouter

from src.api.endpoints import health, process_image

router = APIRouter()
router.include_router(health.router, tags=["health"])
router.include_router(process_image.router, prefix="/api", tags=["studio"])
