"""HTTP caching layer for GitHub requests made by the node version fetcher.

Uses requests-cache to cache GET requests with configurable TTL. Node
versions change rarely, and the fetch makes one request per node file, so
re-running ``pull`` should not hammer GitHub.
"""

import logging
import os
from datetime import timedelta
from pathlib import Path
from typing import Optional

import requests_cache

from .errors import ConfigError

logger = logging.getLogger(__name__)

CACHE_HOURS_ENV = "N8N_NODE_VERSIONS_CACHE_HOURS"


class CachedSession:
    """HTTP session with automatic caching for GET requests.

    Uses SQLite backend: ~/.config/n8n-workflow-sync/<cache_name>.sqlite
    """

    def __init__(
        self,
        cache_dir: Optional[Path] = None,
        cache_name: str = "http_cache",
        expire_after: Optional[timedelta] = None,
    ):
        """Initialize cached session.

        Args:
            cache_dir: Directory for cache database (default: ~/.config/n8n-workflow-sync)
            cache_name: Name of cache database file (without extension)
            expire_after: How long to cache responses (default: 24 hours)
        """
        if cache_dir is None:
            cache_dir = Path.home() / ".config" / "n8n-workflow-sync"

        cache_dir.mkdir(parents=True, exist_ok=True)
        self.cache_path = cache_dir / cache_name

        if expire_after is None:
            expire_after = timedelta(hours=24)

        self.expire_after = expire_after

        self.session = requests_cache.CachedSession(
            str(self.cache_path),
            backend="sqlite",
            expire_after=expire_after,
            allowable_methods=("GET", "HEAD"),
            allowable_codes=(200,),
            stale_if_error=True,
        )

        logger.debug(
            f"Initialized HTTP cache at {self.cache_path} "
            f"(expire_after={expire_after.total_seconds()}s)"
        )

    def get(self, url: str, **kwargs):
        """GET request with caching.

        Args:
            url: URL to request
            **kwargs: Passed to requests.get()

        Returns:
            Response object (from cache if available, fresh otherwise)
        """
        response = self.session.get(url, **kwargs)

        if hasattr(response, "from_cache"):
            source = "cache" if response.from_cache else "network"
            logger.debug(f"GET {url}: {source}")

        return response

    def close(self) -> None:
        """Close session."""
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def get_node_versions_session(cache_dir: Optional[Path] = None) -> CachedSession:
    """Cached session for GitHub tree/raw requests.

    TTL defaults to 24 hours; override with $N8N_NODE_VERSIONS_CACHE_HOURS.

    Raises:
        ConfigError: If the override is not a number
    """
    raw = os.getenv(CACHE_HOURS_ENV, "24")
    try:
        ttl_hours = float(raw)
    except ValueError as e:
        raise ConfigError(f"{CACHE_HOURS_ENV} must be a number of hours, got {raw!r}") from e
    return CachedSession(
        cache_dir=cache_dir,
        cache_name="http_cache_github",
        expire_after=timedelta(hours=ttl_hours),
    )
