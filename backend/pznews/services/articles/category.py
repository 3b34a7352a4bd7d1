"""
Category service - CRUD, activation and ordering
"""

from typing import Any, Dict, List, Mapping, Optional, Union

from loguru import logger
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from pznews.core.exceptions import Conflict, NotFound, ValidationError
from pznews.core.permissions import ensure_can_manage_categories
from pznews.models.articles import Article, Category
from pznews.schemas.articles import CategoryCreate, CategoryUpdate
from pznews.services.base import commit_or_raise
from pznews.utils.cache import CacheTags, TaggedCache
from pznews.utils.slug import slugify
from pznews.utils.validation import ensure_model

SLUG_TAKEN = "Category with this slug already exists"


def _invalidation_tags(*category_ids: Optional[int]) -> List[str]:
    tags = [CacheTags.CATEGORIES, CacheTags.ARTICLES]
    tags.extend(CacheTags.category(cid) for cid in category_ids if cid)
    return tags


class CategoryService:

    @staticmethod
    async def _slug_taken(db: AsyncSession, slug: str, exclude_id: Optional[int] = None) -> bool:
        query = select(Category.id).where(Category.slug == slug)
        if exclude_id is not None:
            query = query.where(Category.id != exclude_id)
        return (await db.execute(query)).first() is not None

    @staticmethod
    async def _check_parent(db: AsyncSession, parent_id: Optional[int], category_id: Optional[int] = None) -> None:
        if parent_id is None:
            return
        if category_id is not None and parent_id == category_id:
            raise ValidationError(
                "Validation error",
                details=[{"field": "parent_id", "message": "A category cannot be its own parent"}],
            )
        parent = (await db.execute(
            select(Category.id, Category.parent_id).where(Category.id == parent_id)
        )).first()
        if parent is None:
            raise ValidationError(
                "Validation error",
                details=[{"field": "parent_id", "message": "Parent category not found"}],
            )
        # one level of nesting
        if parent.parent_id is not None:
            raise ValidationError(
                "Validation error",
                details=[{"field": "parent_id", "message": "Parent category must be a top-level category"}],
            )
        if category_id is not None:
            has_children = (await db.execute(
                select(Category.id).where(Category.parent_id == category_id).limit(1)
            )).first() is not None
            if has_children:
                raise ValidationError(
                    "Validation error",
                    details=[{"field": "parent_id", "message": "A category with subcategories cannot be nested"}],
                )

    @staticmethod
    async def list_categories(db: AsyncSession, include_inactive: bool = False) -> List[Category]:
        query = select(Category).options(selectinload(Category.parent))
        if not include_inactive:
            query = query.where(Category.is_active.is_(True))
        query = query.order_by(Category.display_order, Category.name_bg)
        result = await db.execute(query.execution_options(populate_existing=True))
        return list(result.scalars().all())

    @staticmethod
    async def get_by_id(db: AsyncSession, category_id: int) -> Category:
        result = await db.execute(
            select(Category)
            .options(selectinload(Category.parent))
            .where(Category.id == category_id)
            .execution_options(populate_existing=True)
        )
        category = result.scalar_one_or_none()
        if not category:
            raise NotFound("Category not found")
        return category

    @staticmethod
    async def get_by_slug(db: AsyncSession, slug: str) -> Category:
        """Public lookup, active categories only"""
        result = await db.execute(
            select(Category)
            .options(selectinload(Category.parent))
            .where(Category.slug == slug, Category.is_active.is_(True))
        )
        category = result.scalar_one_or_none()
        if not category:
            raise NotFound("Category not found")
        return category

    @staticmethod
    async def create(
        db: AsyncSession,
        cache: Optional[TaggedCache],
        data: Union[CategoryCreate, Mapping[str, Any]],
        current_user: Dict[str, Any],
    ) -> Category:
        ensure_can_manage_categories(current_user)
        data = ensure_model(CategoryCreate, data)

        slug = data.slug or slugify(data.name_bg)
        if not slug:
            raise ValidationError(
                "Validation error",
                details=[{"field": "slug", "message": "Could not derive a slug from the name"}],
            )
        if await CategoryService._slug_taken(db, slug):
            raise Conflict(SLUG_TAKEN)
        await CategoryService._check_parent(db, data.parent_id)

        category = Category(
            slug=slug,
            name_bg=data.name_bg,
            name_en=data.name_en,
            description=data.description,
            parent_id=data.parent_id,
            display_order=data.display_order,
            is_active=data.is_active,
        )
        db.add(category)
        await commit_or_raise(db, SLUG_TAKEN, "Failed to create category", context=f"create category {slug}")
        logger.info(f"Category created: id={category.id} slug={slug}")

        if cache:
            await cache.invalidate(_invalidation_tags(category.id))
        return await CategoryService.get_by_id(db, category.id)

    @staticmethod
    async def update(
        db: AsyncSession,
        cache: Optional[TaggedCache],
        category_id: int,
        data: Union[CategoryUpdate, Mapping[str, Any]],
        current_user: Dict[str, Any],
    ) -> Category:
        ensure_can_manage_categories(current_user)
        data = ensure_model(CategoryUpdate, data)
        category = await CategoryService.get_by_id(db, category_id)

        changes = data.model_dump(exclude_unset=True)
        new_slug = changes.pop("slug", None)
        if new_slug and new_slug != category.slug:
            if await CategoryService._slug_taken(db, new_slug, exclude_id=category_id):
                raise Conflict(SLUG_TAKEN)
            category.slug = new_slug

        if "parent_id" in changes:
            await CategoryService._check_parent(db, changes["parent_id"], category_id)

        for field, value in changes.items():
            if value is None and field in ("name_bg", "display_order", "is_active"):
                continue
            setattr(category, field, value)

        await commit_or_raise(db, SLUG_TAKEN, "Failed to update category", context=f"update category {category_id}")
        logger.info(f"Category updated: id={category_id}")

        if cache:
            await cache.invalidate(_invalidation_tags(category_id))
        return await CategoryService.get_by_id(db, category_id)

    @staticmethod
    async def delete(
        db: AsyncSession,
        cache: Optional[TaggedCache],
        category_id: int,
        current_user: Dict[str, Any],
    ) -> bool:
        ensure_can_manage_categories(current_user)
        await CategoryService.get_by_id(db, category_id)

        article_count = (await db.execute(
            select(func.count(Article.id)).where(Article.category_id == category_id)
        )).scalar() or 0
        if article_count:
            raise Conflict(f"Cannot delete category with {article_count} article(s)")

        child_count = (await db.execute(
            select(func.count(Category.id)).where(Category.parent_id == category_id)
        )).scalar() or 0
        if child_count:
            raise Conflict(f"Cannot delete category with {child_count} subcategories")

        await db.execute(delete(Category).where(Category.id == category_id))
        await commit_or_raise(db, "Category is still in use", "Failed to delete category",
                              context=f"delete category {category_id}")
        logger.info(f"Category deleted: id={category_id}")

        if cache:
            await cache.invalidate(_invalidation_tags(category_id))
        return True

    @staticmethod
    async def toggle_status(
        db: AsyncSession,
        cache: Optional[TaggedCache],
        category_id: int,
        current_user: Dict[str, Any],
    ) -> Category:
        ensure_can_manage_categories(current_user)
        category = await CategoryService.get_by_id(db, category_id)
        category.is_active = not category.is_active

        await commit_or_raise(db, "Category could not be updated", "Failed to toggle category status",
                              context=f"toggle category {category_id}")
        if cache:
            await cache.invalidate(_invalidation_tags(category_id))
        return await CategoryService.get_by_id(db, category_id)

    @staticmethod
    async def reorder(
        db: AsyncSession,
        cache: Optional[TaggedCache],
        category_ids: List[int],
        current_user: Dict[str, Any],
    ) -> List[Category]:
        """display_order becomes each id's position in the given list"""
        ensure_can_manage_categories(current_user)

        result = await db.execute(select(Category).where(Category.id.in_(category_ids)))
        by_id = {c.id: c for c in result.scalars().all()}
        missing = [cid for cid in category_ids if cid not in by_id]
        if missing:
            raise ValidationError(
                "Validation error",
                details=[{"field": "category_ids", "message": f"Unknown category ids: {missing}"}],
            )

        for position, cid in enumerate(category_ids):
            by_id[cid].display_order = position

        await commit_or_raise(db, "Categories could not be reordered", "Failed to reorder categories",
                              context="reorder categories")
        if cache:
            await cache.invalidate(_invalidation_tags(*category_ids))
        return await CategoryService.list_categories(db, include_inactive=True)

    @staticmethod
    async def article_count(db: AsyncSession, category_id: int, published_only: bool = True) -> int:
        query = select(func.count(Article.id)).where(Article.category_id == category_id)
        if published_only:
            query = query.where(Article.status == "published")
        return (await db.execute(query)).scalar() or 0
