"""
Database models
Table prefix pz_ for every newsroom table
"""

from pznews.db.database import Base

from .core import User, USER_ROLES
from .articles import Article, ARTICLE_STATUSES, Category, Tag, article_tags, Media

__all__ = [
    "Base",
    "User",
    "USER_ROLES",
    "Article",
    "ARTICLE_STATUSES",
    "Category",
    "Tag",
    "article_tags",
    "Media",
]
