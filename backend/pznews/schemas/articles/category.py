"""
Category schemas
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from pznews.schemas.common import ORMModel, RequestModel
from pznews.utils.slug import SLUG_PATTERN


class CategoryCreate(RequestModel):
    name_bg: str = Field(..., min_length=2, max_length=255, description="Bulgarian name")
    name_en: Optional[str] = Field(None, max_length=255)
    slug: Optional[str] = Field(None, min_length=2, max_length=100, pattern=SLUG_PATTERN,
                                description="Derived from name_bg when omitted")
    description: Optional[str] = None
    parent_id: Optional[int] = Field(None, ge=1)
    display_order: int = Field(0, ge=0)
    is_active: bool = True


class CategoryUpdate(RequestModel):
    name_bg: Optional[str] = Field(None, min_length=2, max_length=255)
    name_en: Optional[str] = Field(None, max_length=255)
    slug: Optional[str] = Field(None, min_length=2, max_length=100, pattern=SLUG_PATTERN)
    description: Optional[str] = None
    parent_id: Optional[int] = Field(None, ge=1)
    display_order: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None


class CategoryReorder(RequestModel):
    category_ids: List[int] = Field(..., min_length=1, description="display_order = position in this list")


class ParentInfo(ORMModel):
    id: int
    slug: str
    name_bg: str


class CategoryResponse(ORMModel):
    id: int
    slug: str
    name_bg: str
    name_en: Optional[str] = None
    description: Optional[str] = None
    parent_id: Optional[int] = None
    display_order: int
    is_active: bool
    created_at: datetime
    updated_at: datetime

    parent: Optional[ParentInfo] = None
