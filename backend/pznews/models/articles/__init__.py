"""
Content models: articles, categories, tags, media
"""

from pznews.models.articles.article import Article, ARTICLE_STATUSES
from pznews.models.articles.category import Category
from pznews.models.articles.tag import Tag, article_tags
from pznews.models.articles.media import Media

__all__ = ["Article", "ARTICLE_STATUSES", "Category", "Tag", "article_tags", "Media"]
