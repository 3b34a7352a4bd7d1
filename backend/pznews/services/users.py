"""
User management service
"""

from typing import Any, Dict, Mapping, Optional, Union

from loguru import logger
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from pznews.core.exceptions import Conflict, NotFound
from pznews.models import User
from pznews.schemas.core import UserCreate, UserUpdate
from pznews.services.base import commit_or_raise, like_pattern
from pznews.utils.cache import CacheTags, TaggedCache
from pznews.utils.security import get_password_hash
from pznews.utils.validation import ensure_model

EMAIL_TAKEN = "User with this email already exists"


class UserService:

    @staticmethod
    async def _email_taken(db: AsyncSession, email: str, exclude_id: Optional[int] = None) -> bool:
        query = select(User.id).where(User.email == email)
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)
        return (await db.execute(query)).first() is not None

    @staticmethod
    async def get_by_id(db: AsyncSession, user_id: int) -> User:
        result = await db.execute(
            select(User).where(User.id == user_id).execution_options(populate_existing=True)
        )
        user = result.scalar_one_or_none()
        if not user:
            raise NotFound("User not found")
        return user

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.email == email.strip().lower()))
        return result.scalar_one_or_none()

    @staticmethod
    async def list_users(
        db: AsyncSession,
        search: Optional[str] = None,
        role: Optional[str] = None,
        is_active: Optional[bool] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Dict[str, Any]:
        query = select(User)
        if search:
            pattern = like_pattern(search.strip())
            query = query.where(or_(
                User.email.ilike(pattern, escape="\\"),
                User.full_name.ilike(pattern, escape="\\"),
            ))
        if role:
            query = query.where(User.role == role)
        if is_active is not None:
            query = query.where(User.is_active.is_(is_active))

        count = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar() or 0
        result = await db.execute(query.order_by(User.created_at.desc(), User.id.desc()).offset(offset).limit(limit))
        return {"data": list(result.scalars().all()), "count": count, "has_more": offset + limit < count}

    @staticmethod
    async def create(db: AsyncSession, data: Union[UserCreate, Mapping[str, Any]]) -> User:
        data = ensure_model(UserCreate, data)
        if await UserService._email_taken(db, data.email):
            raise Conflict(EMAIL_TAKEN)

        user = User(
            email=data.email,
            hashed_password=get_password_hash(data.password),
            full_name=data.full_name,
            role=data.role,
            avatar_url=data.avatar_url,
            is_active=True,
        )
        db.add(user)
        await commit_or_raise(db, EMAIL_TAKEN, "Failed to create user", context=f"create user {data.email}")
        logger.info(f"User created: id={user.id} role={user.role}")
        return await UserService.get_by_id(db, user.id)

    @staticmethod
    async def update(
        db: AsyncSession,
        cache: Optional[TaggedCache],
        user_id: int,
        data: Union[UserUpdate, Mapping[str, Any]],
    ) -> User:
        """Cached article payloads embed the author and are dropped on every change."""
        data = ensure_model(UserUpdate, data)
        user = await UserService.get_by_id(db, user_id)

        changes = data.model_dump(exclude_unset=True)
        if changes.get("email") and changes["email"] != user.email:
            if await UserService._email_taken(db, changes["email"], exclude_id=user_id):
                raise Conflict(EMAIL_TAKEN)

        for field, value in changes.items():
            if value is None and field in ("email", "full_name", "role", "is_active"):
                continue
            setattr(user, field, value)

        await commit_or_raise(db, EMAIL_TAKEN, "Failed to update user", context=f"update user {user_id}")
        if cache:
            await cache.invalidate([CacheTags.ARTICLES])
        return await UserService.get_by_id(db, user_id)

    @staticmethod
    async def deactivate(
        db: AsyncSession,
        cache: Optional[TaggedCache],
        user_id: int,
        current_user: Dict[str, Any],
    ) -> User:
        """Soft delete; authored articles and uploads keep their owner"""
        if current_user.get("id") == user_id:
            raise Conflict("You cannot deactivate your own account")
        user = await UserService.get_by_id(db, user_id)
        user.is_active = False
        await commit_or_raise(db, "User could not be deactivated", "Failed to deactivate user",
                              context=f"deactivate user {user_id}")
        if cache:
            await cache.invalidate([CacheTags.ARTICLES])
        logger.info(f"User deactivated: id={user_id}")
        return await UserService.get_by_id(db, user_id)

    @staticmethod
    async def ensure_admin(db: AsyncSession, email: str, password: str, full_name: str) -> User:
        """Create the bootstrap admin if no account uses this email yet."""
        existing = await UserService.get_by_email(db, email)
        if existing:
            return existing
        return await UserService.create(
            db, UserCreate(email=email, password=password, full_name=full_name, role="admin")
        )
