"""
FastAPI dependencies - authentication, roles and shared services
"""

from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from pznews.core.config import settings
from pznews.db.database import get_db
from pznews.services.auth import get_current_user as auth_get_current_user
from pznews.utils.cache import TaggedCache
from pznews.utils.memo import RequestMemo
from pznews.utils.storage import ObjectStorage, get_storage as storage_factory

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_PREFIX}/auth/login", auto_error=False)


async def get_access_token(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
) -> Optional[str]:
    """Bearer header first, then the session cookie."""
    if token:
        return token
    return request.cookies.get(settings.ACCESS_TOKEN_COOKIE_NAME)


async def get_current_user(
    token: Optional[str] = Depends(get_access_token),
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    """
    Authenticated user, required

    Raises:
        401: missing or invalid token
    """
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    user = await auth_get_current_user(token, db)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")
    return user


async def get_current_user_or_none(
    token: Optional[str] = Depends(get_access_token),
    db: AsyncSession = Depends(get_db),
) -> Optional[Dict[str, Any]]:
    """Authenticated user if a valid token was sent, otherwise None."""
    if not token:
        return None
    return await auth_get_current_user(token, db)


async def require_admin(
    current_user: Dict[str, Any] = Depends(get_current_user),
) -> Dict[str, Any]:
    if current_user.get("role") != "admin":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return current_user


def get_cache(request: Request) -> TaggedCache:
    """The cache built at startup; lazily created when the lifespan did not run."""
    cache = getattr(request.app.state, "cache", None)
    if cache is None:
        cache = TaggedCache()
        request.app.state.cache = cache
    return cache


def get_memo() -> RequestMemo:
    # FastAPI caches dependency results per request, so each request gets one memo
    return RequestMemo()


def get_storage() -> ObjectStorage:
    return storage_factory()
