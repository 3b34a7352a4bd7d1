from pznews.schemas.articles.article import (
    ArticleCreate,
    ArticleUpdate,
    ArticleResponse,
    ArticleSummary,
    ArticleStatus,
)
from pznews.schemas.articles.category import (
    CategoryCreate,
    CategoryUpdate,
    CategoryReorder,
    CategoryResponse,
)
from pznews.schemas.articles.media import (
    MediaUpdate,
    MediaResponse,
    MediaStats,
    MediaDeleteResponse,
)

__all__ = [
    "ArticleCreate",
    "ArticleUpdate",
    "ArticleResponse",
    "ArticleSummary",
    "ArticleStatus",
    "CategoryCreate",
    "CategoryUpdate",
    "CategoryReorder",
    "CategoryResponse",
    "MediaUpdate",
    "MediaResponse",
    "MediaStats",
    "MediaDeleteResponse",
]
