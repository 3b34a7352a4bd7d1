"""
User management endpoints - admin only
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from pznews.api.utils import dump, page
from pznews.core.deps import get_cache, require_admin
from pznews.db.database import get_db
from pznews.schemas.core import UserCreate, UserResponse, UserUpdate
from pznews.services.users import UserService
from pznews.utils.cache import TaggedCache

router = APIRouter()


@router.get("")
async def list_users(
    search: Optional[str] = Query(None, max_length=100),
    role: Optional[str] = Query(None, pattern="^(admin|editor|author)$"),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    _: Dict[str, Any] = Depends(require_admin),
) -> Dict[str, Any]:
    result = await UserService.list_users(db, search=search, role=role, is_active=is_active, limit=limit, offset=offset)
    return page(UserResponse, result)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    db: AsyncSession = Depends(get_db),
    _: Dict[str, Any] = Depends(require_admin),
) -> Dict[str, Any]:
    user = await UserService.create(db, user_data)
    return dump(UserResponse, user)


@router.get("/{user_id}")
async def get_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    _: Dict[str, Any] = Depends(require_admin),
) -> Dict[str, Any]:
    return dump(UserResponse, await UserService.get_by_id(db, user_id))


@router.patch("/{user_id}")
async def update_user(
    user_id: int,
    user_data: UserUpdate,
    db: AsyncSession = Depends(get_db),
    cache: TaggedCache = Depends(get_cache),
    _: Dict[str, Any] = Depends(require_admin),
) -> Dict[str, Any]:
    return dump(UserResponse, await UserService.update(db, cache, user_id, user_data))


@router.delete("/{user_id}")
async def deactivate_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    cache: TaggedCache = Depends(get_cache),
    current_user: Dict[str, Any] = Depends(require_admin),
) -> Dict[str, Any]:
    """Deactivates the account; rows referencing the user are kept."""
    user = await UserService.deactivate(db, cache, user_id, current_user)
    return {"success": True, "user": dump(UserResponse, user)}
