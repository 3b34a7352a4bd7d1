from fastapi import APIRouter

from pznews.api.endpoints.system.health import router as health_router
from pznews.api.endpoints.system.sitemap import router as sitemap_router

router = APIRouter()
router.include_router(health_router)
router.include_router(sitemap_router)

__all__ = ["router"]
