"""
Tagged shared cache
Values expire after a per-key TTL and can be dropped in groups by tag.
Redis is the primary store; an in-process TLRU cache takes over when Redis is
disabled or unreachable at startup.
"""

import json
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional, Set

import redis.asyncio as redis
from cachetools import TLRUCache

from pznews.core.config import settings

logger = logging.getLogger(__name__)

# tag sets outlive any cached value they point at
TAG_SET_TTL = 24 * 60 * 60


class MemoryBackend:
    """Process-local backend; each entry carries its own expiry."""

    def __init__(self, maxsize: int, timer: Callable[[], float] = time.monotonic):
        self._data: TLRUCache = TLRUCache(maxsize=maxsize, ttu=lambda _key, value, now: now + value[1], timer=timer)
        self._tags: Dict[str, Set[str]] = {}
        self._key_tags: Dict[str, Set[str]] = {}

    def _forget(self, key: str) -> None:
        for tag in self._key_tags.pop(key, ()):
            keys = self._tags.get(tag)
            if keys is None:
                continue
            keys.discard(key)
            if not keys:
                del self._tags[tag]

    def _prune(self) -> None:
        """Drop index entries for keys the TLRU has evicted or expired."""
        for key in [k for k in self._key_tags if k not in self._data]:
            self._forget(key)

    async def get(self, key: str) -> Optional[str]:
        entry = self._data.get(key)
        return entry[0] if entry is not None else None

    async def set(self, key: str, value: str, ttl: int, tags: Iterable[str]) -> None:
        tags = list(tags)
        self._forget(key)
        self._data[key] = (value, ttl)
        self._key_tags[key] = set(tags)
        for tag in tags:
            self._tags.setdefault(tag, set()).add(key)
        # sweep in batches; the index never tracks more than twice maxsize keys
        if len(self._key_tags) > 2 * self._data.maxsize:
            self._prune()

    async def invalidate(self, tags: Iterable[str]) -> int:
        deleted = 0
        for tag in tags:
            for key in self._tags.pop(tag, set()):
                if self._data.pop(key, None) is not None:
                    deleted += 1
                self._forget(key)
        return deleted

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        self._data.clear()
        self._tags.clear()
        self._key_tags.clear()


class RedisBackend:
    def __init__(self, client: redis.Redis, prefix: str):
        self._client = client
        self._prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self._prefix}:c:{key}"

    def _tag(self, tag: str) -> str:
        return f"{self._prefix}:t:{tag}"

    async def get(self, key: str) -> Optional[str]:
        return await self._client.get(self._key(key))

    async def set(self, key: str, value: str, ttl: int, tags: Iterable[str]) -> None:
        full_key = self._key(key)
        pipe = self._client.pipeline()
        pipe.setex(full_key, ttl, value)
        for tag in tags:
            pipe.sadd(self._tag(tag), full_key)
            pipe.expire(self._tag(tag), TAG_SET_TTL)
        await pipe.execute()

    async def invalidate(self, tags: Iterable[str]) -> int:
        deleted = 0
        for tag in tags:
            tag_key = self._tag(tag)
            members = await self._client.smembers(tag_key)
            if members:
                deleted += int(await self._client.delete(*members) or 0)
            await self._client.delete(tag_key)
        return deleted

    async def ping(self) -> bool:
        pong = await self._client.ping()
        return pong is True or pong == "PONG"

    async def close(self) -> None:
        await self._client.aclose()


class TaggedCache:
    """Cache service shared by every persistence service.

    Built once at startup and handed to services; failures in the backing
    store degrade to cache misses and are logged, never raised.
    """

    def __init__(self, backend: Optional[str] = None, prefix: Optional[str] = None):
        self.backend_name = (backend or settings.CACHE_BACKEND).lower()
        self.prefix = prefix or settings.CACHE_KEY_PREFIX
        self._backend: Any = None

    async def initialize(self) -> None:
        if self._backend is not None:
            return

        if self.backend_name == "redis":
            client = redis.Redis(
                host=settings.REDIS_HOST,
                port=settings.REDIS_PORT,
                db=settings.REDIS_DB_CACHE,
                decode_responses=True,
                socket_connect_timeout=settings.REDIS_CONNECT_TIMEOUT,
                socket_keepalive=True,
                retry_on_timeout=True,
            )
            try:
                await client.ping()
                self._backend = RedisBackend(client, self.prefix)
                logger.info("Redis cache backend ready")
                return
            except Exception as e:
                logger.warning(f"Redis unavailable ({e}), using in-process cache")
                await client.aclose()

        self._backend = MemoryBackend(settings.MEMORY_CACHE_MAXSIZE)
        self.backend_name = "memory"

    async def _ensure(self) -> Any:
        if self._backend is None:
            await self.initialize()
        return self._backend

    async def get(self, key: str) -> Optional[Any]:
        try:
            backend = await self._ensure()
            value = await backend.get(key)
            if value is None:
                return None
            return json.loads(value)
        except Exception as e:
            logger.warning(f"Cache get failed for {key}: {e}")
            return None

    async def set(self, key: str, value: Any, ttl: int, tags: Iterable[str] = ()) -> bool:
        try:
            backend = await self._ensure()
            await backend.set(key, json.dumps(value, ensure_ascii=False, default=str), int(ttl), list(tags))
            return True
        except Exception as e:
            logger.warning(f"Cache set failed for {key}: {e}")
            return False

    async def invalidate(self, tags: Iterable[str]) -> int:
        tags = [t for t in tags if t]
        if not tags:
            return 0
        try:
            backend = await self._ensure()
            deleted = await backend.invalidate(tags)
            logger.debug(f"Invalidated {deleted} cache entries for tags {tags}")
            return deleted
        except Exception as e:
            logger.warning(f"Cache invalidation failed for {tags}: {e}")
            return 0

    async def get_or_set(
        self,
        key: str,
        loader: Callable[[], Awaitable[Any]],
        ttl: int,
        tags: Iterable[str] = (),
    ) -> Any:
        cached = await self.get(key)
        if cached is not None:
            logger.debug(f"Cache hit: {key}")
            return cached

        logger.debug(f"Cache miss: {key}")
        value = await loader()
        if value is not None:
            await self.set(key, value, ttl, tags)
        return value

    async def ping(self) -> bool:
        try:
            backend = await self._ensure()
            return await backend.ping()
        except Exception:
            return False

    async def close(self) -> None:
        if self._backend is None:
            return
        try:
            await self._backend.close()
        except Exception as e:
            logger.warning(f"Cache close failed: {e}")
        finally:
            self._backend = None
            logger.info("Cache backend closed")


def cache_key(prefix: str, *args: Any) -> str:
    """Compact key builder: cache_key("articles:latest", 10) -> "articles:latest:10"."""
    if not args:
        return prefix
    return prefix + ":" + ":".join("0" if arg is None else str(arg) for arg in args)


class CacheTags:
    """Invalidation labels attached to cached reads"""

    ARTICLES = "articles"
    LATEST = "latest-articles"
    FEATURED = "featured-articles"
    BREAKING = "breaking-news"
    TRENDING = "trending-articles"
    CATEGORIES = "categories"
    TAGS = "tags"
    MEDIA = "media"

    @staticmethod
    def category(category_id: Any) -> str:
        return f"category-{category_id}"

    @staticmethod
    def article(slug: str) -> str:
        return f"article-{slug}"
