"""
Article endpoints
Public reads are limited to published articles; writes need a signed-in user
and are checked against the article's owner and the caller's role.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from pznews.api.utils import dump, page
from pznews.core.config import settings
from pznews.core.deps import get_cache, get_current_user, get_current_user_or_none, get_memo
from pznews.core.exceptions import NotFound
from pznews.db.database import get_db
from pznews.schemas.articles import ArticleCreate, ArticleResponse, ArticleSummary, ArticleUpdate
from pznews.services.articles import ArticleService
from pznews.services.articles import queries
from pznews.utils.cache import TaggedCache
from pznews.utils.memo import RequestMemo

router = APIRouter()


@router.get("")
async def list_articles(
    status_filter: Optional[str] = Query(None, alias="status", pattern="^(all|draft|published|archived)$"),
    category_id: Optional[int] = Query(None, alias="categoryId", ge=1),
    author_id: Optional[int] = Query(None, alias="authorId", ge=1),
    search: Optional[str] = Query(None, max_length=200),
    limit: int = Query(settings.ARTICLE_PAGE_SIZE_DEFAULT, ge=1, le=settings.ARTICLE_PAGE_SIZE_MAX),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    current_user: Optional[Dict[str, Any]] = Depends(get_current_user_or_none),
) -> Dict[str, Any]:
    """
    Filtered article list

    Anonymous callers only ever see published articles.
    """
    if current_user is None:
        status_filter = "published"

    result = await ArticleService.list_articles(
        db,
        status=status_filter,
        category_id=category_id,
        author_id=author_id,
        search=search,
        limit=limit,
        offset=offset,
    )
    return page(ArticleSummary, result)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_article(
    article_data: ArticleCreate,
    db: AsyncSession = Depends(get_db),
    cache: TaggedCache = Depends(get_cache),
    current_user: Dict[str, Any] = Depends(get_current_user),
) -> Dict[str, Any]:
    article = await ArticleService.create(db, cache, article_data, author_id=current_user["id"])
    return dump(ArticleResponse, article)


@router.get("/slug/{slug}")
async def get_article_by_slug(
    slug: str,
    db: AsyncSession = Depends(get_db),
    cache: TaggedCache = Depends(get_cache),
    memo: RequestMemo = Depends(get_memo),
) -> Dict[str, Any]:
    """Public article view; every successful read counts one view."""
    article = await memo.load(("article_by_slug", slug), lambda: queries.public_article(db, cache, slug))
    ArticleService.count_view(article["id"])
    return article


@router.get("/{article_id}")
async def get_article(
    article_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: Optional[Dict[str, Any]] = Depends(get_current_user_or_none),
) -> Dict[str, Any]:
    article = await ArticleService.get_by_id(db, article_id)
    if current_user is None and article.status != "published":
        raise NotFound("Article not found")
    return dump(ArticleResponse, article)


@router.patch("/{article_id}")
async def update_article(
    article_id: int,
    article_data: ArticleUpdate,
    db: AsyncSession = Depends(get_db),
    cache: TaggedCache = Depends(get_cache),
    current_user: Dict[str, Any] = Depends(get_current_user),
) -> Dict[str, Any]:
    article = await ArticleService.update(db, cache, article_id, article_data, current_user)
    return dump(ArticleResponse, article)


@router.delete("/{article_id}")
async def delete_article(
    article_id: int,
    db: AsyncSession = Depends(get_db),
    cache: TaggedCache = Depends(get_cache),
    current_user: Dict[str, Any] = Depends(get_current_user),
) -> Dict[str, Any]:
    await ArticleService.delete(db, cache, article_id, current_user)
    return {"success": True}


@router.post("/{article_id}/publish")
async def publish_article(
    article_id: int,
    db: AsyncSession = Depends(get_db),
    cache: TaggedCache = Depends(get_cache),
    current_user: Dict[str, Any] = Depends(get_current_user),
) -> Dict[str, Any]:
    article = await ArticleService.publish(db, cache, article_id, current_user)
    return dump(ArticleResponse, article)


@router.post("/{article_id}/unpublish")
async def unpublish_article(
    article_id: int,
    db: AsyncSession = Depends(get_db),
    cache: TaggedCache = Depends(get_cache),
    current_user: Dict[str, Any] = Depends(get_current_user),
) -> Dict[str, Any]:
    article = await ArticleService.unpublish(db, cache, article_id, current_user)
    return dump(ArticleResponse, article)


@router.post("/{article_id}/archive")
async def archive_article(
    article_id: int,
    db: AsyncSession = Depends(get_db),
    cache: TaggedCache = Depends(get_cache),
    current_user: Dict[str, Any] = Depends(get_current_user),
) -> Dict[str, Any]:
    article = await ArticleService.archive(db, cache, article_id, current_user)
    return dump(ArticleResponse, article)
