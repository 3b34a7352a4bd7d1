"""
Database engine and session management
SQLAlchemy async engine and session factory
"""

from typing import Any, AsyncGenerator, Dict

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool, StaticPool

from pznews.core.config import settings


class Base(DeclarativeBase):
    """SQLAlchemy declarative base"""
    pass


if not settings.DATABASE_URL:
    raise ValueError("DATABASE_URL is not configured, check the database settings in .env")


def _engine_options(url: str) -> Dict[str, Any]:
    if url.startswith("sqlite"):
        if url.endswith("://") or ":memory:" in url:
            # in-memory sqlite must share a single connection across sessions
            return {
                "poolclass": StaticPool,
                "connect_args": {"check_same_thread": False},
            }
        return {"poolclass": NullPool}
    return {
        "pool_size": settings.POSTGRES_MAX_CONNECTIONS,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_timeout": settings.DB_POOL_TIMEOUT_SECONDS,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
        "connect_args": {
            "server_settings": {
                "client_encoding": "utf8",
                "statement_timeout": str(settings.POSTGRES_STATEMENT_TIMEOUT),
            }
        },
    }


engine = create_async_engine(
    str(settings.DATABASE_URL),
    echo=settings.SQLALCHEMY_ECHO,
    **_engine_options(str(settings.DATABASE_URL)),
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Per-request database session
    Used through FastAPI dependency injection
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


async def create_tables() -> None:
    """Create all tables; development and first deploy only, production runs Alembic."""
    import pznews.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    await engine.dispose()
