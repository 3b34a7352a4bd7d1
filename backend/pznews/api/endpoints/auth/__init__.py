from pznews.api.endpoints.auth.auth import router

__all__ = ["router"]
