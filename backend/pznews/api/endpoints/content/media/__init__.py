from pznews.api.endpoints.content.media.media import router as media_router
from pznews.api.endpoints.content.media.upload import router as upload_router

__all__ = ["media_router", "upload_router"]
