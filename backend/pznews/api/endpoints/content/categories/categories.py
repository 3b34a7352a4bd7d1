"""
Category endpoints
Reads are public; writes need an admin or editor.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from pznews.api.utils import dump
from pznews.core.deps import get_cache, get_current_user
from pznews.db.database import get_db
from pznews.schemas.articles import CategoryCreate, CategoryReorder, CategoryResponse, CategoryUpdate
from pznews.services.articles import CategoryService
from pznews.utils.cache import TaggedCache

router = APIRouter()


@router.get("")
async def list_categories(
    include_inactive: bool = Query(False, alias="includeInactive"),
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    categories = await CategoryService.list_categories(db, include_inactive=include_inactive)
    return {"categories": [dump(CategoryResponse, c) for c in categories]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_category(
    category_data: CategoryCreate,
    db: AsyncSession = Depends(get_db),
    cache: TaggedCache = Depends(get_cache),
    current_user: Dict[str, Any] = Depends(get_current_user),
) -> Dict[str, Any]:
    category = await CategoryService.create(db, cache, category_data, current_user)
    return dump(CategoryResponse, category)


@router.post("/reorder")
async def reorder_categories(
    payload: CategoryReorder,
    db: AsyncSession = Depends(get_db),
    cache: TaggedCache = Depends(get_cache),
    current_user: Dict[str, Any] = Depends(get_current_user),
) -> Dict[str, Any]:
    categories = await CategoryService.reorder(db, cache, payload.category_ids, current_user)
    return {"success": True, "categories": [dump(CategoryResponse, c) for c in categories]}


@router.get("/slug/{slug}")
async def get_category_by_slug(slug: str, db: AsyncSession = Depends(get_db)) -> Dict[str, Any]:
    category = await CategoryService.get_by_slug(db, slug)
    return dump(CategoryResponse, category)


@router.get("/{category_id}")
async def get_category(category_id: int, db: AsyncSession = Depends(get_db)) -> Dict[str, Any]:
    category = await CategoryService.get_by_id(db, category_id)
    return dump(CategoryResponse, category)


@router.patch("/{category_id}")
async def update_category(
    category_id: int,
    category_data: CategoryUpdate,
    db: AsyncSession = Depends(get_db),
    cache: TaggedCache = Depends(get_cache),
    current_user: Dict[str, Any] = Depends(get_current_user),
) -> Dict[str, Any]:
    category = await CategoryService.update(db, cache, category_id, category_data, current_user)
    return dump(CategoryResponse, category)


@router.delete("/{category_id}")
async def delete_category(
    category_id: int,
    db: AsyncSession = Depends(get_db),
    cache: TaggedCache = Depends(get_cache),
    current_user: Dict[str, Any] = Depends(get_current_user),
) -> Dict[str, Any]:
    await CategoryService.delete(db, cache, category_id, current_user)
    return {"success": True}


@router.post("/{category_id}/toggle")
async def toggle_category(
    category_id: int,
    db: AsyncSession = Depends(get_db),
    cache: TaggedCache = Depends(get_cache),
    current_user: Dict[str, Any] = Depends(get_current_user),
) -> Dict[str, Any]:
    category = await CategoryService.toggle_status(db, cache, category_id, current_user)
    return dump(CategoryResponse, category)
