import asyncio
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from config import Settings, logger
from config.constants import CACHE_CONFIG
from exceptions import CacheUnavailableException
from models.requests import ContentCategory
from models.verdicts import CacheEntry, EnsembleVerdict


def cache_key(category: ContentCategory, fingerprint: str) -> str:
    """Deterministic across processes: derived from content, never object identity."""
    return f"{CACHE_CONFIG.KEY_PREFIX}:{category.value}:{fingerprint}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CacheStore(ABC):
    """get/put/delete of verdicts. put is first-writer-wins."""

    @abstractmethod
    async def get(self, key: str) -> Optional[EnsembleVerdict]:
        ...

    @abstractmethod
    async def put(self, key: str, verdict: EnsembleVerdict, ttl: int) -> bool:
        """Store unless a live entry exists. Returns True if this call wrote it."""

    @abstractmethod
    async def delete(self, key: str):
        ...

    async def close(self):
        pass


class InMemoryCacheStore(CacheStore):
    """Per-process store. Expired entries are evicted lazily on read."""

    def __init__(self, clock: Callable[[], datetime] = _utcnow):
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = asyncio.Lock()
        self._clock = clock

    async def get(self, key: str) -> Optional[EnsembleVerdict]:
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(self._clock()):
                del self._entries[key]
                return None
            return entry.verdict

    async def put(self, key: str, verdict: EnsembleVerdict, ttl: int) -> bool:
        if ttl <= 0:
            return False
        async with self._lock:
            now = self._clock()
            current = self._entries.get(key)
            if current is not None and not current.is_expired(now):
                return False
            self._entries[key] = CacheEntry(key=key, verdict=verdict, expires_at=now + timedelta(seconds=ttl))
            return True

    async def delete(self, key: str):
        async with self._lock:
            self._entries.pop(key, None)

    async def purge_expired(self) -> int:
        async with self._lock:
            now = self._clock()
            expired = [k for k, entry in self._entries.items() if entry.is_expired(now)]
            for k in expired:
                del self._entries[k]
        if expired:
            logger.info(f"Purged {len(expired)} expired cache entries")
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)


class RedisCacheStore(CacheStore):
    """Shared store in Redis. Verdicts are kept as JSON; TTL is enforced by Redis."""

    def __init__(self, url: str = None, client: Optional[redis.Redis] = None):
        self._client = client or redis.Redis.from_url(
            url,
            socket_timeout=CACHE_CONFIG.DEFAULT_TIMEOUT,
            socket_connect_timeout=CACHE_CONFIG.DEFAULT_TIMEOUT,
        )

    async def get(self, key: str) -> Optional[EnsembleVerdict]:
        try:
            raw = await self._client.get(key)
        except RedisError as e:
            logger.error(f"Error retrieving key {key} from cache: {e}")
            raise CacheUnavailableException("redis", str(e)) from e
        if raw is None:
            return None
        try:
            return EnsembleVerdict.model_validate_json(raw)
        except ValueError as e:
            logger.warning(f"Discarding unreadable cache entry {key}: {e}")
            await self.delete(key)
            return None

    async def put(self, key: str, verdict: EnsembleVerdict, ttl: int) -> bool:
        if ttl <= 0:
            return False
        try:
            written = await self._client.set(key, verdict.model_dump_json(), ex=ttl, nx=True)
        except RedisError as e:
            logger.error(f"Error setting key {key} in cache: {e}")
            raise CacheUnavailableException("redis", str(e)) from e
        return bool(written)

    async def delete(self, key: str):
        try:
            await self._client.delete(key)
        except RedisError as e:
            logger.error(f"Error deleting key {key} from cache: {e}")
            raise CacheUnavailableException("redis", str(e)) from e

    async def close(self):
        await self._client.aclose()


def build_cache_store(active_settings: Settings) -> CacheStore:
    if active_settings.REDIS_URL:
        logger.info("Using Redis verdict cache.")
        return RedisCacheStore(active_settings.REDIS_URL)
    logger.info("REDIS_URL not set; using in-memory verdict cache.")
    return InMemoryCacheStore()
