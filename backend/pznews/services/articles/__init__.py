from pznews.services.articles.article import ArticleService
from pznews.services.articles.category import CategoryService
from pznews.services.articles.media import MediaService, IncomingFile
from pznews.services.articles.tag import TagService

__all__ = ["ArticleService", "CategoryService", "MediaService", "IncomingFile", "TagService"]
