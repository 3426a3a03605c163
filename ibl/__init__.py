"""
iPlayer Business Layer (iBL) API client

    client = create_client(retries=0)
    episodes = await client.get_episodes(["p03c0hx5", "p03bm6zg"])
"""
import logging
from typing import Optional, Dict, Any

from .client import HttpDelegate, IblClient, IblHttpDelegate
from .core.caching import MemoryCache, RedisCache
from .core.config import ClientConfig, DEFAULT_BASE_URL
from .core.errors import TransportError

__version__ = "1.0.0"

__all__ = [
    "create_client",
    "create_custom_client",
    "ClientConfig",
    "HttpDelegate",
    "IblClient",
    "IblHttpDelegate",
    "MemoryCache",
    "RedisCache",
    "TransportError",
    "DEFAULT_BASE_URL",
]

logger = logging.getLogger(__name__)


def create_client(options: Optional[Dict[str, Any]] = None, **kwargs) -> IblClient:
    """
    Build a client over the default aiohttp delegate.

    Options (keyword or mapping) are ClientConfig fields, plus `cache` to
    supply a ready-made cache object. A Redis cache is attached when both
    cache_host and cache_port are set.
    """
    options = {**(options or {}), **kwargs}
    cache = options.pop("cache", None)
    config = ClientConfig.from_options(options)

    if cache is None and config.cache_enabled:
        cache = RedisCache(config.cache_host, config.cache_port, partition=config.cache_partition)
        logger.info(f"[IblClient] Caching responses in Redis at {config.cache_host}:{config.cache_port}")

    return IblClient(IblHttpDelegate(config, cache=cache), config.base_url)


def create_custom_client(delegate, base_url: Optional[str] = None) -> IblClient:
    """Build a client over a caller-supplied delegate (test doubles, other transports)"""
    return IblClient(delegate, base_url)
