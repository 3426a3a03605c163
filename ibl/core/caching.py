# core/caching.py
import copy
import json
import time
import logging
from typing import Dict, Any, Optional, Tuple
from urllib.parse import urlencode

import redis.asyncio as redis

from .config import DEFAULT_PARTITION

logger = logging.getLogger(__name__)


def make_cache_key(url: str, params: Optional[Dict[str, Any]] = None) -> str:
    """
    Build a cache key from a request URL and its query parameters.

    Parameters are sorted so that equal mappings give equal keys.
    """
    if not params:
        return url
    return f"{url}?{urlencode(sorted(params.items()))}"


class MemoryCache:
    """In-process response cache with per-entry expiry"""

    def __init__(self, partition: str = DEFAULT_PARTITION):
        self.partition = partition
        self._cache: Dict[str, Tuple[Any, float]] = {}

    def _key(self, key: str) -> str:
        return f"{self.partition}:{key}"

    async def get(self, key: str) -> Optional[Any]:
        entry = self._cache.get(self._key(key))
        if entry is None:
            return None
        value, expires_at = entry
        if time.time() >= expires_at:
            del self._cache[self._key(key)]
            return None
        return copy.deepcopy(value)

    async def set(self, key: str, value: Any, ttl: int) -> None:
        if ttl <= 0:
            return
        self._cache[self._key(key)] = (copy.deepcopy(value), time.time() + ttl)

    def purge_expired(self) -> int:
        """Evict entries past their expiry and return how many were evicted"""
        now = time.time()
        keys_to_remove = [key for key, (_, expires_at) in self._cache.items() if now >= expires_at]
        for key in keys_to_remove:
            del self._cache[key]
        return len(keys_to_remove)

    def clear(self) -> None:
        self._cache.clear()

    def stats(self) -> Dict[str, Any]:
        """Entry counts for this partition; expired entries linger until read or purged"""
        now = time.time()
        remaining = [expires_at - now for _, expires_at in self._cache.values()]
        live = [r for r in remaining if r > 0]
        return {
            "partition": self.partition,
            "total_entries": len(remaining),
            "live_entries": len(live),
            "longest_ttl": max(live) if live else 0,
        }

    async def close(self) -> None:
        self.clear()


class RedisCache:
    """
    Redis-backed response cache shared between processes.
    Values are stored as JSON under "<partition>:<key>".
    """

    def __init__(self, host: str, port: int, partition: str = DEFAULT_PARTITION, client: Optional[redis.Redis] = None):
        self.partition = partition
        self._client = client or redis.Redis(host=host, port=port, decode_responses=True)

    def _key(self, key: str) -> str:
        return f"{self.partition}:{key}"

    async def get(self, key: str) -> Optional[Any]:
        raw = await self._client.get(self._key(key))
        if not raw:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"[RedisCache] Dropping undecodable entry for {key}")
            return None

    async def set(self, key: str, value: Any, ttl: int) -> None:
        if ttl <= 0:
            return
        await self._client.setex(self._key(key), ttl, json.dumps(value))

    async def close(self) -> None:
        await self._client.aclose()
