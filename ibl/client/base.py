"""
Base HTTP delegate for iBL API requests
Handles retries, timeouts, caching and error handling
"""
import re
import asyncio
import logging
from typing import Optional, Dict, Any, Protocol, runtime_checkable

import aiohttp

from ..core.caching import make_cache_key
from ..core.config import ClientConfig
from ..core.errors import TransportError

logger = logging.getLogger(__name__)

_MAX_AGE = re.compile(r"max-age=(\d+)")


@runtime_checkable
class HttpDelegate(Protocol):
    """Anything able to GET a URL with query params and return the decoded body"""

    async def get(self, url: str, params: Dict[str, Any]) -> Any:
        ...


def encode_params(params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Turn query options into values aiohttp can put on the wire"""
    encoded = {}
    for key, value in (params or {}).items():
        if value is None:
            continue
        if isinstance(value, bool):
            encoded[key] = "true" if value else "false"
        elif isinstance(value, (str, int, float)):
            encoded[key] = value
        else:
            encoded[key] = str(value)
    return encoded


def cache_ttl_from_headers(cache_control: Optional[str], fallback: int = 0) -> int:
    """Seconds a response may be cached for, given its Cache-Control header"""
    if cache_control:
        directives = cache_control.lower()
        if "no-store" in directives or "no-cache" in directives:
            return 0
        match = _MAX_AGE.search(directives)
        if match:
            return int(match.group(1))
    return max(fallback, 0)


class IblHttpDelegate:
    """Default aiohttp transport with retry logic for the iBL API"""

    def __init__(self, config: Optional[ClientConfig] = None, cache=None):
        self.config = config or ClientConfig()
        self.cache = cache
        self.default_headers = {
            "User-Agent": self.config.user_agent,
            "Accept": "application/json",
            **self.config.headers,
        }

    async def get(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        Make GET request with retry logic

        Args:
            url: Absolute resource URL
            params: Query parameters

        Returns:
            Decoded JSON body

        Raises:
            TransportError: on HTTP status >= 400, network failure or a non-JSON body
        """
        params = encode_params(params)
        cache_key = make_cache_key(url, params)

        if self.cache is not None:
            try:
                cached = await self.cache.get(cache_key)
            except Exception as exc:
                logger.warning(f"[IblHttp] Cache lookup failed for {cache_key}: {exc}")
                cached = None
            if cached is not None:
                logger.debug(f"[IblHttp] Cache hit for {cache_key}")
                return cached

        body, ttl = await self._get_with_retries(url, params)

        if self.cache is not None and ttl > 0:
            try:
                await self.cache.set(cache_key, body, ttl)
            except Exception as exc:
                logger.warning(f"[IblHttp] Cache store failed for {cache_key}: {exc}")
        return body

    async def _get_with_retries(self, url: str, params: Dict[str, Any]):
        tries = self.config.retries + 1
        backoff = self.config.retry_backoff
        timeout = aiohttp.ClientTimeout(total=self.config.timeout)

        for attempt in range(1, tries + 1):
            try:
                return await self._fetch(url, params, timeout)
            except TransportError as exc:
                retryable = exc.status_code is None or exc.status_code >= 500
                if not retryable or attempt == tries:
                    logger.warning(f"[IblHttp] {url} failed: {exc} (attempt {attempt}/{tries})")
                    raise
                logger.warning(f"[IblHttp] {url} failed: {exc}, retrying (attempt {attempt}/{tries})")
                await asyncio.sleep(backoff * attempt)

    async def _fetch(self, url: str, params: Dict[str, Any], timeout: aiohttp.ClientTimeout):
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(url, params=params, headers=self.default_headers) as resp:
                    text = await resp.text()
                    if resp.status >= 400:
                        raise TransportError(
                            f"Received HTTP code {resp.status} for GET {resp.url}",
                            status_code=resp.status,
                            url=str(resp.url),
                            body=text[:200],
                        )
                    try:
                        body = await resp.json(content_type=None)
                    except ValueError as exc:
                        raise TransportError(
                            f"Invalid JSON from GET {resp.url}: {exc}",
                            status_code=resp.status,
                            url=str(resp.url),
                            body=text[:200],
                        ) from exc
                    ttl = cache_ttl_from_headers(resp.headers.get("Cache-Control"), self.config.cache_ttl)
                    return body, ttl
        except asyncio.TimeoutError as exc:
            raise TransportError(f"Request timed out after {self.config.timeout}s: GET {url}", url=url) from exc
        except aiohttp.ClientError as exc:
            raise TransportError(f"Request failed: GET {url}: {exc}", url=url) from exc

    async def close(self) -> None:
        if self.cache is not None:
            await self.cache.close()
