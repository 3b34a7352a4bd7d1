"""
Article service - CRUD, publishing workflow and view counting
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Union

from loguru import logger
from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from pznews.core.exceptions import Conflict, NotFound, ValidationError
from pznews.core.permissions import ensure_can_modify_article
from pznews.db.database import AsyncSessionLocal
from pznews.models.articles import Article, Category, Media, article_tags
from pznews.schemas.articles import ArticleCreate, ArticleUpdate
from pznews.services.articles.tag import TagService
from pznews.services.base import commit_or_raise, like_pattern
from pznews.utils.cache import CacheTags, TaggedCache
from pznews.utils.slug import slugify
from pznews.utils.tasks import spawn_background
from pznews.utils.validation import ensure_model

SLUG_TAKEN = "Article with this slug already exists"

# columns that may not be cleared through a partial update
_NOT_NULL_FIELDS = {"title", "content", "status", "is_featured", "is_breaking"}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _invalidation_tags(*articles: Any) -> List[str]:
    tags = [
        CacheTags.ARTICLES,
        CacheTags.LATEST,
        CacheTags.FEATURED,
        CacheTags.BREAKING,
        CacheTags.TRENDING,
        CacheTags.CATEGORIES,
        CacheTags.TAGS,
    ]
    for article in articles:
        if not article:
            continue
        slug = article.get("slug") if isinstance(article, dict) else article.slug
        category_id = article.get("category_id") if isinstance(article, dict) else article.category_id
        if slug:
            tags.append(CacheTags.article(slug))
        if category_id:
            tags.append(CacheTags.category(category_id))
    return list(dict.fromkeys(tags))


async def increment_view_count(article_id: int) -> None:
    """Atomic +1 in its own session; updated_at is left untouched."""
    async with AsyncSessionLocal() as session:
        await session.execute(
            update(Article)
            .where(Article.id == article_id)
            .values(view_count=Article.view_count + 1, updated_at=Article.updated_at)
        )
        await session.commit()


class ArticleService:
    """Article CRUD; every write invalidates the cached reads it affects"""

    @staticmethod
    def _with_relations(query):
        return query.options(
            selectinload(Article.author),
            selectinload(Article.category),
            selectinload(Article.featured_image),
            selectinload(Article.tags),
        )

    @staticmethod
    async def _slug_taken(db: AsyncSession, slug: str, exclude_id: Optional[int] = None) -> bool:
        query = select(Article.id).where(Article.slug == slug)
        if exclude_id is not None:
            query = query.where(Article.id != exclude_id)
        result = await db.execute(query)
        return result.first() is not None

    @staticmethod
    async def _check_references(db: AsyncSession, category_id: Optional[int], featured_image_id: Optional[int]) -> None:
        details = []
        if category_id is not None and await db.get(Category, category_id) is None:
            details.append({"field": "category_id", "message": "Category not found"})
        if featured_image_id is not None and await db.get(Media, featured_image_id) is None:
            details.append({"field": "featured_image_id", "message": "Media not found"})
        if details:
            raise ValidationError("Validation error", details=details)

    @staticmethod
    async def get_by_id(db: AsyncSession, article_id: int) -> Article:
        query = ArticleService._with_relations(select(Article).where(Article.id == article_id))
        result = await db.execute(query.execution_options(populate_existing=True))
        article = result.scalar_one_or_none()
        if not article:
            raise NotFound("Article not found")
        return article

    @staticmethod
    async def get_by_slug(db: AsyncSession, slug: str, published_only: bool = True) -> Article:
        query = select(Article).where(Article.slug == slug)
        if published_only:
            query = query.where(Article.status == "published")
        result = await db.execute(ArticleService._with_relations(query).execution_options(populate_existing=True))
        article = result.scalar_one_or_none()
        if not article:
            raise NotFound("Article not found")
        return article

    @staticmethod
    def count_view(article_id: int) -> None:
        """Detached view increment; the reader never waits for it or sees its failure."""
        spawn_background(increment_view_count(article_id), name=f"article-view-{article_id}")

    @staticmethod
    async def create(
        db: AsyncSession,
        cache: Optional[TaggedCache],
        data: Union[ArticleCreate, Mapping[str, Any]],
        author_id: Optional[int],
    ) -> Article:
        data = ensure_model(ArticleCreate, data)

        slug = data.slug or slugify(data.title)
        if not slug:
            raise ValidationError(
                "Validation error",
                details=[{"field": "slug", "message": "Could not derive a slug from the title"}],
            )
        if await ArticleService._slug_taken(db, slug):
            raise Conflict(SLUG_TAKEN)

        await ArticleService._check_references(db, data.category_id, data.featured_image_id)

        article = Article(
            slug=slug,
            title=data.title,
            subtitle=data.subtitle,
            excerpt=data.excerpt,
            content=data.content,
            status=data.status,
            is_featured=data.is_featured,
            is_breaking=data.is_breaking,
            category_id=data.category_id,
            author_id=author_id,
            featured_image_id=data.featured_image_id,
            meta_title=data.meta_title,
            meta_description=data.meta_description,
            meta_keywords=data.meta_keywords,
            published_at=_now() if data.status == "published" else None,
        )
        article.tags = await TagService.get_or_create_many(db, data.tags)
        db.add(article)

        await commit_or_raise(db, SLUG_TAKEN, "Failed to create article", context=f"create article {slug}")
        logger.info(f"Article created: id={article.id} slug={slug} status={data.status}")

        if cache:
            await cache.invalidate(_invalidation_tags(article))
        return await ArticleService.get_by_id(db, article.id)

    @staticmethod
    async def update(
        db: AsyncSession,
        cache: Optional[TaggedCache],
        article_id: int,
        data: Union[ArticleUpdate, Mapping[str, Any]],
        current_user: Dict[str, Any],
    ) -> Article:
        data = ensure_model(ArticleUpdate, data)
        article = await ArticleService.get_by_id(db, article_id)
        ensure_can_modify_article(current_user, article)

        before = {"slug": article.slug, "category_id": article.category_id}
        changes = data.model_dump(exclude_unset=True)
        tag_names = changes.pop("tags", None)
        new_slug = changes.pop("slug", None)

        # the URL follows the title only until the article has been published once
        if new_slug is None and changes.get("title") and changes["title"] != article.title and article.published_at is None:
            new_slug = slugify(changes["title"]) or None

        if new_slug and new_slug != article.slug:
            if await ArticleService._slug_taken(db, new_slug, exclude_id=article.id):
                raise Conflict(SLUG_TAKEN)
            article.slug = new_slug

        if "category_id" in changes or "featured_image_id" in changes:
            await ArticleService._check_references(db, changes.get("category_id"), changes.get("featured_image_id"))

        if changes.get("status") == "published" and article.published_at is None:
            article.published_at = _now()

        for field, value in changes.items():
            if value is None and field in _NOT_NULL_FIELDS:
                continue
            setattr(article, field, value)

        if tag_names is not None:
            article.tags = await TagService.get_or_create_many(db, tag_names)

        await commit_or_raise(db, SLUG_TAKEN, "Failed to update article", context=f"update article {article_id}")
        logger.info(f"Article updated: id={article_id} fields={sorted(changes)}")

        article = await ArticleService.get_by_id(db, article_id)
        if cache:
            await cache.invalidate(_invalidation_tags(before, article))
        return article

    @staticmethod
    async def delete(
        db: AsyncSession,
        cache: Optional[TaggedCache],
        article_id: int,
        current_user: Dict[str, Any],
    ) -> bool:
        article = await ArticleService.get_by_id(db, article_id)
        ensure_can_modify_article(current_user, article)
        before = {"slug": article.slug, "category_id": article.category_id}

        await db.execute(delete(article_tags).where(article_tags.c.article_id == article_id))
        await db.execute(delete(Article).where(Article.id == article_id))
        await commit_or_raise(db, "Article could not be deleted", "Failed to delete article",
                              context=f"delete article {article_id}")
        logger.info(f"Article deleted: id={article_id} slug={before['slug']}")

        if cache:
            await cache.invalidate(_invalidation_tags(before))
        return True

    @staticmethod
    async def publish(db, cache, article_id: int, current_user: Dict[str, Any]) -> Article:
        return await ArticleService.update(db, cache, article_id, ArticleUpdate(status="published"), current_user)

    @staticmethod
    async def unpublish(db, cache, article_id: int, current_user: Dict[str, Any]) -> Article:
        return await ArticleService.update(db, cache, article_id, ArticleUpdate(status="draft"), current_user)

    @staticmethod
    async def archive(db, cache, article_id: int, current_user: Dict[str, Any]) -> Article:
        return await ArticleService.update(db, cache, article_id, ArticleUpdate(status="archived"), current_user)

    @staticmethod
    async def list_articles(
        db: AsyncSession,
        status: Optional[str] = None,
        category_id: Optional[int] = None,
        author_id: Optional[int] = None,
        search: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Dict[str, Any]:
        """
        Filtered, newest-first page of articles

        Returns:
            {"data": [Article], "count": total matches, "has_more": offset + limit < count}
        """
        query = select(Article)

        if status and status != "all":
            query = query.where(Article.status == status)
        if category_id:
            query = query.where(Article.category_id == category_id)
        if author_id:
            query = query.where(Article.author_id == author_id)
        if search:
            pattern = like_pattern(search.strip())
            query = query.where(or_(
                Article.title.ilike(pattern, escape="\\"),
                Article.excerpt.ilike(pattern, escape="\\"),
            ))

        count_result = await db.execute(select(func.count()).select_from(query.subquery()))
        count = count_result.scalar() or 0

        query = query.order_by(Article.created_at.desc(), Article.id.desc()).offset(offset).limit(limit)
        result = await db.execute(ArticleService._with_relations(query))
        articles = list(result.scalars().all())

        return {"data": articles, "count": count, "has_more": offset + limit < count}
