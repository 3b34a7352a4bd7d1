from pznews.api.endpoints.content.articles.articles import router

__all__ = ["router"]
