"""
Article schemas
Request validation and response shapes
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field, field_validator

from pznews.schemas.common import ORMModel, RequestModel
from pznews.utils.slug import SLUG_PATTERN

ArticleStatus = Literal["draft", "published", "archived"]


def _clean_tags(v: Optional[List[str]]) -> Optional[List[str]]:
    if v is None:
        return None
    seen = []
    for name in v:
        name = (name or "").strip()
        if name and name not in seen:
            seen.append(name)
    return seen


class ArticleCreate(RequestModel):
    title: str = Field(..., min_length=5, max_length=500, description="Headline")
    subtitle: Optional[str] = Field(None, max_length=500)
    excerpt: Optional[str] = Field(None, max_length=1000)
    content: str = Field(..., min_length=50, description="Rich HTML body")
    slug: Optional[str] = Field(None, min_length=1, max_length=255, pattern=SLUG_PATTERN)

    category_id: Optional[int] = Field(None, ge=1)
    featured_image_id: Optional[int] = Field(None, ge=1)
    tags: List[str] = Field(default_factory=list, description="Tag names, created on demand")

    status: ArticleStatus = "draft"
    is_featured: bool = False
    is_breaking: bool = False

    meta_title: Optional[str] = Field(None, max_length=255)
    meta_description: Optional[str] = Field(None, max_length=500)
    meta_keywords: Optional[List[str]] = None

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        if len(v.strip()) < 5:
            raise ValueError("Title must be at least 5 characters")
        return v.strip()

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v):
        return _clean_tags(v) or []


class ArticleUpdate(RequestModel):
    """Partial update; only fields present in the payload are applied"""
    title: Optional[str] = Field(None, min_length=5, max_length=500)
    subtitle: Optional[str] = Field(None, max_length=500)
    excerpt: Optional[str] = Field(None, max_length=1000)
    content: Optional[str] = Field(None, min_length=50)
    slug: Optional[str] = Field(None, min_length=1, max_length=255, pattern=SLUG_PATTERN)

    category_id: Optional[int] = Field(None, ge=1)
    featured_image_id: Optional[int] = Field(None, ge=1)
    tags: Optional[List[str]] = None

    status: Optional[ArticleStatus] = None
    is_featured: Optional[bool] = None
    is_breaking: Optional[bool] = None

    meta_title: Optional[str] = Field(None, max_length=255)
    meta_description: Optional[str] = Field(None, max_length=500)
    meta_keywords: Optional[List[str]] = None

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        if len(v.strip()) < 5:
            raise ValueError("Title must be at least 5 characters")
        return v.strip()

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v):
        return _clean_tags(v)


class AuthorInfo(ORMModel):
    id: int
    full_name: str
    avatar_url: Optional[str] = None


class CategoryInfo(ORMModel):
    id: int
    slug: str
    name_bg: str
    name_en: Optional[str] = None


class FeaturedImageInfo(ORMModel):
    id: int
    public_url: str
    file_name: str
    alt_text: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None


class TagInfo(ORMModel):
    id: int
    slug: str
    name: str


class ArticleResponse(ORMModel):
    id: int
    slug: str
    title: str
    subtitle: Optional[str] = None
    excerpt: Optional[str] = None
    content: str
    status: str
    is_featured: bool
    is_breaking: bool
    view_count: int = 0
    published_at: Optional[datetime] = None

    category_id: Optional[int] = None
    author_id: Optional[int] = None
    featured_image_id: Optional[int] = None

    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    meta_keywords: Optional[List[str]] = None

    created_at: datetime
    updated_at: datetime

    author: Optional[AuthorInfo] = None
    category: Optional[CategoryInfo] = None
    featured_image: Optional[FeaturedImageInfo] = None
    tags: List[TagInfo] = Field(default_factory=list)


class ArticleSummary(ORMModel):
    """List/feed card without the body"""
    id: int
    slug: str
    title: str
    subtitle: Optional[str] = None
    excerpt: Optional[str] = None
    status: str
    is_featured: bool
    is_breaking: bool
    view_count: int = 0
    published_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    author: Optional[AuthorInfo] = None
    category: Optional[CategoryInfo] = None
    featured_image: Optional[FeaturedImageInfo] = None
