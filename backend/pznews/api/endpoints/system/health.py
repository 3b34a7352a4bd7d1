"""
Health check endpoint
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pznews.core.config import settings
from pznews.core.deps import get_cache
from pznews.db.database import get_db
from pznews.utils.cache import TaggedCache

router = APIRouter()


@router.get("/health")
async def health_check(
    db: AsyncSession = Depends(get_db),
    cache: TaggedCache = Depends(get_cache),
) -> Dict[str, Any]:
    """
    Database and cache status

    healthy: both reachable; degraded: cache down; unhealthy: database down
    """
    try:
        result = await db.execute(text("SELECT 1"))
        db_status = "healthy" if result.scalar() == 1 else "unhealthy"
    except SQLAlchemyError:
        db_status = "unhealthy"

    cache_status = "healthy" if await cache.ping() else "unhealthy"

    if db_status != "healthy":
        overall_status = "unhealthy"
    elif cache_status != "healthy":
        overall_status = "degraded"
    else:
        overall_status = "healthy"

    return {
        "status": overall_status,
        "checks": {
            "database": db_status,
            "cache": cache_status,
            "cache_backend": cache.backend_name,
        },
        "service": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
