from pznews.api.endpoints.management.users.users import router

__all__ = ["router"]
