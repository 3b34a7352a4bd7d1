from pznews.api.endpoints.content.feed.feed import router

__all__ = ["router"]
