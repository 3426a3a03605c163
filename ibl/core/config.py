# config.py
import os
import logging
from dataclasses import dataclass, field, fields
from typing import Optional, Dict, Any

from dotenv import load_dotenv

load_dotenv(override=False)
logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://ibl.api.bbci.co.uk/ibl/v1"
DEFAULT_PARTITION = "ibl-client"


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return int(raw)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return float(raw)


@dataclass
class ClientConfig:
    """
    Settings for a default iBL client.

    Every field falls back to an IBL_* environment variable (a local .env
    file is honoured), then to the built-in default.
    """
    base_url: str = field(default_factory=lambda: os.getenv("IBL_BASE_URL", DEFAULT_BASE_URL))

    # Transport
    timeout: float = field(default_factory=lambda: _env_float("IBL_TIMEOUT", 2.0))
    retries: int = field(default_factory=lambda: _env_int("IBL_RETRIES", 1))
    retry_backoff: float = field(default_factory=lambda: _env_float("IBL_RETRY_BACKOFF", 0.1))
    user_agent: str = field(default_factory=lambda: os.getenv("IBL_USER_AGENT", "ibl-client"))
    headers: Dict[str, str] = field(default_factory=dict)

    # Response cache (Redis when host and port are both set)
    cache_host: Optional[str] = field(default_factory=lambda: os.getenv("IBL_CACHE_HOST") or None)
    cache_port: Optional[int] = field(default_factory=lambda: _env_int("IBL_CACHE_PORT", None))
    cache_partition: str = field(default_factory=lambda: os.getenv("IBL_CACHE_PARTITION", DEFAULT_PARTITION))
    cache_ttl: int = field(default_factory=lambda: _env_int("IBL_CACHE_TTL", 0))

    def __post_init__(self):
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.retries < 0:
            raise ValueError("retries must be >= 0")
        if self.retry_backoff < 0:
            raise ValueError("retry_backoff must be >= 0")
        if self.cache_port is not None:
            self.cache_port = int(self.cache_port)

    @property
    def cache_enabled(self) -> bool:
        return bool(self.cache_host and self.cache_port)

    @classmethod
    def from_options(cls, options: Optional[Dict[str, Any]] = None) -> "ClientConfig":
        """Build a config from a loose options mapping, ignoring keys it does not know"""
        options = dict(options or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(k for k in options if k not in known)
        if unknown:
            logger.warning(f"[ClientConfig] Ignoring unknown options: {', '.join(unknown)}")
        return cls(**{k: v for k, v in options.items() if k in known})
