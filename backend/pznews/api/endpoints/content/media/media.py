"""
Media library endpoints
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from pznews.api.utils import dump, page
from pznews.core.config import settings
from pznews.core.deps import get_cache, get_current_user, get_storage
from pznews.db.database import get_db
from pznews.schemas.articles import MediaDeleteResponse, MediaResponse, MediaStats, MediaUpdate
from pznews.services.articles import MediaService
from pznews.utils.cache import TaggedCache
from pznews.utils.storage import ObjectStorage

router = APIRouter()


@router.get("")
async def list_media(
    uploaded_by: Optional[int] = Query(None, alias="uploadedBy", ge=1),
    limit: int = Query(settings.MEDIA_PAGE_SIZE_DEFAULT, ge=1, le=settings.MEDIA_PAGE_SIZE_MAX),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    _: Dict[str, Any] = Depends(get_current_user),
) -> Dict[str, Any]:
    result = await MediaService.list_media(db, uploaded_by=uploaded_by, limit=limit, offset=offset)
    return page(MediaResponse, result)


@router.get("/stats")
async def media_stats(
    uploaded_by: Optional[int] = Query(None, alias="uploadedBy", ge=1),
    db: AsyncSession = Depends(get_db),
    _: Dict[str, Any] = Depends(get_current_user),
) -> Dict[str, Any]:
    stats = await MediaService.stats(db, uploaded_by=uploaded_by)
    return MediaStats(**stats).model_dump(by_alias=True)


@router.get("/search")
async def search_media(
    q: str = Query(..., min_length=1, max_length=200),
    limit: int = Query(20, ge=1, le=settings.MEDIA_PAGE_SIZE_MAX),
    db: AsyncSession = Depends(get_db),
    _: Dict[str, Any] = Depends(get_current_user),
) -> Dict[str, Any]:
    media = await MediaService.search(db, q, limit=limit)
    return {"data": [dump(MediaResponse, m) for m in media]}


@router.get("/{media_id}")
async def get_media(
    media_id: int,
    db: AsyncSession = Depends(get_db),
    _: Dict[str, Any] = Depends(get_current_user),
) -> Dict[str, Any]:
    media = await MediaService.get_by_id(db, media_id)
    return dump(MediaResponse, media)


@router.patch("/{media_id}")
async def update_media(
    media_id: int,
    media_data: MediaUpdate,
    db: AsyncSession = Depends(get_db),
    cache: TaggedCache = Depends(get_cache),
    current_user: Dict[str, Any] = Depends(get_current_user),
) -> Dict[str, Any]:
    media = await MediaService.update(db, cache, media_id, media_data, current_user)
    return dump(MediaResponse, media)


@router.delete("/{media_id}")
async def delete_media(
    media_id: int,
    db: AsyncSession = Depends(get_db),
    cache: TaggedCache = Depends(get_cache),
    storage: ObjectStorage = Depends(get_storage),
    current_user: Dict[str, Any] = Depends(get_current_user),
) -> Dict[str, Any]:
    cleanup = await MediaService.delete(db, cache, storage, media_id, current_user)
    return MediaDeleteResponse(success=True, storage_cleanup=cleanup).model_dump(by_alias=True)
