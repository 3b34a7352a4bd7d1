"""
API router registration
"""

from fastapi import APIRouter

from pznews.api.endpoints.system import router as system_router
from pznews.api.endpoints.auth import router as auth_router
from pznews.api.endpoints.content.articles import router as articles_router
from pznews.api.endpoints.content.categories import router as categories_router
from pznews.api.endpoints.content.media import media_router, upload_router
from pznews.api.endpoints.content.feed import router as feed_router
from pznews.api.endpoints.management.users import router as users_router

api_router = APIRouter()

api_router.include_router(system_router, tags=["system"])
api_router.include_router(auth_router, tags=["authentication"], prefix="/auth")
api_router.include_router(articles_router, tags=["articles"], prefix="/articles")
api_router.include_router(categories_router, tags=["categories"], prefix="/categories")
api_router.include_router(upload_router, tags=["media"], prefix="/upload")
api_router.include_router(media_router, tags=["media"], prefix="/media")
api_router.include_router(feed_router, tags=["feed"], prefix="/feed")
api_router.include_router(users_router, tags=["users"], prefix="/users")
