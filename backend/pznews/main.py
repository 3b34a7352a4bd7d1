"""
PZ News backend entry point
FastAPI application setup and startup
"""

import uuid

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from pznews.api import api_router
from pznews.core.config import settings
from pznews.core.exceptions import PZNewsException
from pznews.core.logging import configure_logging
from pznews.db.database import AsyncSessionLocal, close_db, create_tables
from pznews.services.users import UserService
from pznews.utils.cache import TaggedCache
from pznews.utils.tasks import drain_background_tasks
from pznews.utils.validation import field_errors


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: logging, tables (development only), bootstrap admin, cache
    Shutdown: pending background work, cache and database connections
    """
    configure_logging()
    logger.info("Application starting...")

    if settings.DEBUG or settings.AUTO_CREATE_TABLES:
        logger.info("Creating tables (development / first deploy only, production runs Alembic)")
        await create_tables()

    await create_admin_account()

    cache = TaggedCache()
    await cache.initialize()
    app.state.cache = cache
    logger.info(f"Cache ready ({cache.backend_name})")

    logger.info("Application started")
    yield
    logger.info("Application shutting down...")

    await drain_background_tasks()
    await cache.close()
    await close_db()
    logger.info("Application stopped")


async def create_admin_account() -> None:
    """Bootstrap admin from ADMIN_EMAIL / ADMIN_PASSWORD; existing accounts are left alone."""
    if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD:
        logger.warning("Admin account settings incomplete, skipping bootstrap")
        return

    try:
        async with AsyncSessionLocal() as session:
            admin = await UserService.ensure_admin(
                session, settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD, settings.ADMIN_FULL_NAME,
            )
            logger.info(f"Admin account ready: {admin.email}")
    except (PZNewsException, SQLAlchemyError) as e:
        # startup continues; the admin can be created later with the seed script
        logger.error(f"Admin bootstrap failed: {e}")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="PZ News regional news API",
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan,
)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response: Response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
        return response


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        rid = request.headers.get("x-request-id") or uuid.uuid4().hex
        request.state.request_id = rid
        with logger.contextualize(request_id=rid):
            response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response


@app.exception_handler(PZNewsException)
async def pznews_exception_handler(request: Request, exc: PZNewsException):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": "Validation error", "details": field_errors(exc.errors())},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"{request.method} {request.url.path} database error: {exc}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


if settings.DEBUG:
    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=r"^http://(localhost|127\.0\.0\.1)(:\d+)?$",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
elif settings.CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin) for origin in settings.CORS_ORIGINS],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestIdMiddleware)

app.include_router(api_router, prefix=settings.API_PREFIX)


@app.get("/")
async def root():
    return {
        "name": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "docs": "/docs" if settings.DEBUG else None,
        "health": f"{settings.API_PREFIX}/health",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "pznews.main:app",
        host=settings.BACKEND_HOST,
        port=settings.BACKEND_PORT,
        reload=settings.BACKEND_RELOAD,
        log_level=settings.LOG_LEVEL.lower(),
    )
