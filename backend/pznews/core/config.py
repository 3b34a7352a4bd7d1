"""
Application configuration
Loaded from environment variables with typed access
"""

import json
from pathlib import Path
from typing import List, Optional, Union
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator, model_validator

PROJECT_ROOT = Path(__file__).resolve().parents[3]


class Settings(BaseSettings):
    """Application settings, loaded from the environment and `.env`."""

    # ==================== Project ====================
    PROJECT_NAME: str = Field(default="PZ News")
    VERSION: str = Field(default="1.0.0")
    API_PREFIX: str = Field(default="/api")

    # ==================== Server ====================
    BACKEND_HOST: str = Field(default="0.0.0.0")
    BACKEND_PORT: int = Field(default=8000)
    BACKEND_RELOAD: bool = Field(default=True)
    SITE_URL: str = Field(default="http://localhost:3000")

    # ==================== Security ====================
    SECRET_KEY: str = Field(default="change_me")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=60 * 24 * 7)
    ALGORITHM: str = Field(default="HS256")
    ACCESS_TOKEN_COOKIE_NAME: str = Field(default="pz_access_token")
    COOKIE_SAMESITE: str = Field(default="lax")
    COOKIE_SECURE: bool = Field(default=False)
    COOKIE_DOMAIN: Optional[str] = Field(default=None)

    # ==================== Debug / logging ====================
    DEBUG: bool = Field(default=True)
    LOG_LEVEL: str = Field(default="INFO")

    # ==================== CORS ====================
    CORS_ORIGINS: List[str] = Field(default=["http://localhost:3000", "http://127.0.0.1:3000"])

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        """Accept a JSON list or a comma separated string."""
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    # ==================== Database ====================
    POSTGRES_USER: str = Field(default="pznews")
    POSTGRES_PASSWORD: str = Field(default="change_me")
    POSTGRES_DB: str = Field(default="pznews")
    POSTGRES_HOST: str = Field(default="127.0.0.1")
    POSTGRES_PORT: str = Field(default="5432")
    POSTGRES_MAX_CONNECTIONS: int = Field(default=20)
    DB_MAX_OVERFLOW: int = Field(default=20)
    DB_POOL_TIMEOUT_SECONDS: int = Field(default=30)
    POSTGRES_STATEMENT_TIMEOUT: int = Field(default=30000)
    DATABASE_DRIVER: str = Field(default="asyncpg")
    SQLALCHEMY_ECHO: bool = Field(default=False)

    DATABASE_URL: Optional[str] = Field(default=None)

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def assemble_db_connection(cls, v: Optional[str], info) -> Optional[str]:
        """Use DATABASE_URL as given, otherwise build it from the POSTGRES_* parts."""
        if v:
            # Hosted Postgres providers still hand out postgres:// URLs
            if v.startswith("postgres://"):
                v = v.replace("postgres://", "postgresql+asyncpg://", 1)
            return v

        values = info.data
        driver = values.get("DATABASE_DRIVER", "asyncpg")
        username = values.get("POSTGRES_USER")
        password = values.get("POSTGRES_PASSWORD")
        host = values.get("POSTGRES_HOST")
        port = values.get("POSTGRES_PORT")
        db = values.get("POSTGRES_DB")

        if all([driver, username, password, host, port, db]):
            return f"postgresql+{driver}://{username}:{password}@{host}:{port}/{db}"
        return None

    AUTO_CREATE_TABLES: bool = Field(default=False)

    # ==================== Redis / cache ====================
    CACHE_BACKEND: str = Field(default="redis")  # redis, memory
    REDIS_HOST: str = Field(default="localhost")
    REDIS_PORT: int = Field(default=6379)
    REDIS_DB_CACHE: int = Field(default=0)
    REDIS_CONNECT_TIMEOUT: int = Field(default=5)
    CACHE_KEY_PREFIX: str = Field(default="pz")
    MEMORY_CACHE_MAXSIZE: int = Field(default=2048)

    # Shared cache TTLs (seconds), tuned per query volatility
    CACHE_TTL_LATEST: int = Field(default=30)
    CACHE_TTL_FEATURED: int = Field(default=30)
    CACHE_TTL_BREAKING: int = Field(default=60)
    CACHE_TTL_TRENDING: int = Field(default=120)
    CACHE_TTL_BY_CATEGORY: int = Field(default=300)
    CACHE_TTL_CATEGORY_COUNT: int = Field(default=3600)
    CACHE_TTL_BY_TAG: int = Field(default=300)
    CACHE_TTL_ARTICLE_DETAIL: int = Field(default=60)

    # ==================== Object storage ====================
    STORAGE_BACKEND: str = Field(default="s3")  # s3, local
    S3_ENDPOINT_URL: Optional[str] = Field(default=None)
    S3_ACCESS_KEY_ID: Optional[str] = Field(default=None)
    S3_SECRET_ACCESS_KEY: Optional[str] = Field(default=None)
    S3_REGION: str = Field(default="auto")
    S3_BUCKET_NAME: str = Field(default="pz-news-images")
    STORAGE_PUBLIC_URL: str = Field(default="")
    LOCAL_STORAGE_DIR: str = Field(default="./data/media")

    # ==================== Uploads ====================
    MAX_UPLOAD_SIZE: int = Field(default=10 * 1024 * 1024)
    UPLOAD_KEY_PREFIX: str = Field(default="uploads")
    IMAGE_MAX_DIMENSION: int = Field(default=2000)
    IMAGE_QUALITY: int = Field(default=85)
    UPLOAD_CACHE_CONTROL: str = Field(default="public, max-age=31536000, immutable")

    # ==================== Pagination ====================
    ARTICLE_PAGE_SIZE_DEFAULT: int = Field(default=20)
    ARTICLE_PAGE_SIZE_MAX: int = Field(default=100)
    MEDIA_PAGE_SIZE_DEFAULT: int = Field(default=50)
    MEDIA_PAGE_SIZE_MAX: int = Field(default=200)
    FEED_LIMIT_MAX: int = Field(default=50)

    # ==================== Bootstrap admin ====================
    ADMIN_EMAIL: str = Field(default="admin@pz-news.com")
    ADMIN_PASSWORD: str = Field(default="change_me")
    ADMIN_FULL_NAME: str = Field(default="Administrator")

    @model_validator(mode="after")
    def validate_security_settings(self):
        if "POSTGRES_MAX_CONNECTIONS" not in self.model_fields_set:
            self.POSTGRES_MAX_CONNECTIONS = 20 if self.DEBUG else 50
        if "DB_MAX_OVERFLOW" not in self.model_fields_set:
            self.DB_MAX_OVERFLOW = 10 if self.DEBUG else 20
        self.COOKIE_SAMESITE = (self.COOKIE_SAMESITE or "lax").lower()
        self.STORAGE_PUBLIC_URL = (self.STORAGE_PUBLIC_URL or "").rstrip("/")
        self.SITE_URL = (self.SITE_URL or "").rstrip("/")

        if self.DEBUG:
            return self

        def must_set(name: str, value: str):
            if not value or str(value).strip() in {"", "change_me"}:
                raise ValueError(f"{name} is unset or still the default, set a real value in .env")

        must_set("SECRET_KEY", self.SECRET_KEY)
        must_set("ADMIN_PASSWORD", self.ADMIN_PASSWORD)

        if len(self.SECRET_KEY) < 32:
            raise ValueError("SECRET_KEY is too short, use at least 32 characters")

        return self

    class Config:
        env_file = str(PROJECT_ROOT / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
