"""
Public feed endpoints
Homepage blocks and category/tag listings served from the shared cache
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from pznews.api.utils import dump
from pznews.core.config import settings
from pznews.core.deps import get_cache, get_memo
from pznews.db.database import get_db
from pznews.schemas.articles import CategoryResponse
from pznews.services.articles import CategoryService, TagService
from pznews.services.articles import queries
from pznews.utils.cache import TaggedCache
from pznews.utils.memo import RequestMemo

router = APIRouter()


@router.get("/latest")
async def latest(
    limit: int = Query(10, ge=1, le=settings.FEED_LIMIT_MAX),
    db: AsyncSession = Depends(get_db),
    cache: TaggedCache = Depends(get_cache),
) -> Dict[str, Any]:
    return {"articles": await queries.latest_articles(db, cache, limit)}


@router.get("/featured")
async def featured(
    limit: int = Query(5, ge=1, le=settings.FEED_LIMIT_MAX),
    db: AsyncSession = Depends(get_db),
    cache: TaggedCache = Depends(get_cache),
) -> Dict[str, Any]:
    return {"articles": await queries.featured_articles(db, cache, limit)}


@router.get("/breaking")
async def breaking(
    limit: int = Query(5, ge=1, le=settings.FEED_LIMIT_MAX),
    db: AsyncSession = Depends(get_db),
    cache: TaggedCache = Depends(get_cache),
) -> Dict[str, Any]:
    return {"articles": await queries.breaking_news(db, cache, limit)}


@router.get("/trending")
async def trending(
    limit: int = Query(10, ge=1, le=settings.FEED_LIMIT_MAX),
    db: AsyncSession = Depends(get_db),
    cache: TaggedCache = Depends(get_cache),
) -> Dict[str, Any]:
    return {"articles": await queries.trending_articles(db, cache, limit)}


@router.get("/category/{slug}")
async def category_feed(
    slug: str,
    limit: int = Query(20, ge=1, le=settings.FEED_LIMIT_MAX),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    cache: TaggedCache = Depends(get_cache),
    memo: RequestMemo = Depends(get_memo),
) -> Dict[str, Any]:
    category = await memo.load(("category_by_slug", slug), lambda: CategoryService.get_by_slug(db, slug))
    listing = await queries.articles_by_category(db, cache, category.id, limit, offset)
    article_count = await queries.category_article_count(db, cache, category.id)
    return {
        "category": dump(CategoryResponse, category),
        "articles": listing["articles"],
        "total": listing["total"],
        "articleCount": article_count,
        "hasMore": offset + limit < listing["total"],
    }


@router.get("/tag/{slug}")
async def tag_feed(
    slug: str,
    limit: int = Query(20, ge=1, le=settings.FEED_LIMIT_MAX),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    cache: TaggedCache = Depends(get_cache),
) -> Dict[str, Any]:
    tag = await TagService.get_by_slug(db, slug)
    listing = await queries.articles_by_tag(db, cache, tag.slug, limit, offset)
    return {
        "tag": {"id": tag.id, "slug": tag.slug, "name": tag.name},
        "articles": listing["articles"],
        "total": listing["total"],
        "hasMore": offset + limit < listing["total"],
    }


@router.get("/tags")
async def popular_tags(
    search: Optional[str] = Query(None, max_length=100),
    limit: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    return {"tags": await TagService.list_tags(db, search=search, limit=limit)}
