from pznews.api.endpoints.content.categories.categories import router

__all__ = ["router"]
