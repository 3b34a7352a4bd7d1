"""
Cached public reads
Each query stores a JSON-ready payload in the tagged cache; article and
category writes drop the matching tags.
"""

from typing import Any, Dict, List

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from pznews.core.config import settings
from pznews.models.articles import Article, Tag
from pznews.schemas.articles import ArticleResponse, ArticleSummary
from pznews.services.articles.article import ArticleService
from pznews.services.articles.category import CategoryService
from pznews.utils.cache import CacheTags, TaggedCache, cache_key


def _summaries(articles) -> List[Dict[str, Any]]:
    return [ArticleSummary.model_validate(a).model_dump(mode="json") for a in articles]


def _published():
    return (
        select(Article)
        .where(Article.status == "published")
        .options(
            selectinload(Article.author),
            selectinload(Article.category),
            selectinload(Article.featured_image),
        )
        .execution_options(populate_existing=True)
    )


async def _fetch(db: AsyncSession, query) -> List[Dict[str, Any]]:
    result = await db.execute(query)
    return _summaries(result.scalars().all())


async def latest_articles(db: AsyncSession, cache: TaggedCache, limit: int = 10) -> List[Dict[str, Any]]:
    async def load():
        return await _fetch(db, _published().order_by(Article.published_at.desc(), Article.id.desc()).limit(limit))

    return await cache.get_or_set(
        cache_key("articles:latest", limit), load,
        settings.CACHE_TTL_LATEST, [CacheTags.LATEST, CacheTags.ARTICLES],
    )


async def featured_articles(db: AsyncSession, cache: TaggedCache, limit: int = 5) -> List[Dict[str, Any]]:
    async def load():
        query = _published().where(Article.is_featured.is_(True))
        return await _fetch(db, query.order_by(Article.published_at.desc(), Article.id.desc()).limit(limit))

    return await cache.get_or_set(
        cache_key("articles:featured", limit), load,
        settings.CACHE_TTL_FEATURED, [CacheTags.FEATURED, CacheTags.ARTICLES],
    )


async def breaking_news(db: AsyncSession, cache: TaggedCache, limit: int = 5) -> List[Dict[str, Any]]:
    async def load():
        query = _published().where(Article.is_breaking.is_(True))
        return await _fetch(db, query.order_by(Article.published_at.desc(), Article.id.desc()).limit(limit))

    return await cache.get_or_set(
        cache_key("articles:breaking", limit), load,
        settings.CACHE_TTL_BREAKING, [CacheTags.BREAKING, CacheTags.ARTICLES],
    )


async def trending_articles(db: AsyncSession, cache: TaggedCache, limit: int = 10) -> List[Dict[str, Any]]:
    async def load():
        return await _fetch(db, _published().order_by(Article.view_count.desc(), Article.id.desc()).limit(limit))

    return await cache.get_or_set(
        cache_key("articles:trending", limit), load,
        settings.CACHE_TTL_TRENDING, [CacheTags.TRENDING, CacheTags.ARTICLES],
    )


async def articles_by_category(
    db: AsyncSession,
    cache: TaggedCache,
    category_id: int,
    limit: int = 20,
    offset: int = 0,
) -> Dict[str, Any]:
    async def load():
        base = select(Article.id).where(Article.status == "published", Article.category_id == category_id)
        total = (await db.execute(select(func.count()).select_from(base.subquery()))).scalar() or 0
        query = (
            _published()
            .where(Article.category_id == category_id)
            .order_by(Article.published_at.desc(), Article.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return {"articles": await _fetch(db, query), "total": total}

    return await cache.get_or_set(
        cache_key("articles:category", category_id, limit, offset), load,
        settings.CACHE_TTL_BY_CATEGORY,
        [CacheTags.ARTICLES, CacheTags.CATEGORIES, CacheTags.category(category_id)],
    )


async def category_article_count(db: AsyncSession, cache: TaggedCache, category_id: int) -> int:
    async def load():
        return await CategoryService.article_count(db, category_id)

    return await cache.get_or_set(
        cache_key("categories:count", category_id), load,
        settings.CACHE_TTL_CATEGORY_COUNT,
        [CacheTags.CATEGORIES, CacheTags.category(category_id)],
    )


async def articles_by_tag(
    db: AsyncSession,
    cache: TaggedCache,
    tag_slug: str,
    limit: int = 20,
    offset: int = 0,
) -> Dict[str, Any]:
    async def load():
        base = (
            select(Article.id)
            .join(Article.tags)
            .where(Article.status == "published", Tag.slug == tag_slug)
        )
        total = (await db.execute(select(func.count()).select_from(base.subquery()))).scalar() or 0
        query = (
            _published()
            .join(Article.tags)
            .where(Tag.slug == tag_slug)
            .order_by(Article.published_at.desc(), Article.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return {"articles": await _fetch(db, query), "total": total}

    return await cache.get_or_set(
        cache_key("articles:tag", tag_slug, limit, offset), load,
        settings.CACHE_TTL_BY_TAG, [CacheTags.ARTICLES, CacheTags.TAGS],
    )


async def public_article(db: AsyncSession, cache: TaggedCache, slug: str) -> Dict[str, Any]:
    """Published article payload by slug; NotFound is raised, never cached."""
    async def load():
        article = await ArticleService.get_by_slug(db, slug, published_only=True)
        return ArticleResponse.model_validate(article).model_dump(mode="json")

    return await cache.get_or_set(
        cache_key("articles:detail", slug), load,
        settings.CACHE_TTL_ARTICLE_DETAIL, [CacheTags.ARTICLES, CacheTags.article(slug)],
    )
