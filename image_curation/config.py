"""
Runtime configuration read from the environment (and an optional .env file).

Algorithm constants live next to the code that uses them; this module only
holds deployment settings such as the result cache connection.
"""
from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

from .cache.results import DEFAULT_TTL_SECONDS, ResultCache
from .cache.store import KVRestCacheStore

load_dotenv()

logger = logging.getLogger(__name__)

# ── Result cache (Redis-compatible REST KV) ───────────────────────────────────
# Caching is enabled only when both values are present.
KV_REST_API_URL: str | None   = os.getenv("KV_REST_API_URL", "").strip() or None
KV_REST_API_TOKEN: str | None = os.getenv("KV_REST_API_TOKEN", "").strip() or None

# Seconds a cached analysis stays valid
IMAGE_DIVERSITY_CACHE_TTL: int = int(
    os.getenv("IMAGE_DIVERSITY_CACHE_TTL", str(DEFAULT_TTL_SECONDS))
)

# ── Logging ───────────────────────────────────────────────────────────────────
IMAGE_CURATION_LOG_LEVEL: str = os.getenv("IMAGE_CURATION_LOG_LEVEL", "INFO").upper()


def build_result_cache() -> ResultCache | None:
    """Return a ResultCache backed by the configured KV store, or None if unset."""
    if not KV_REST_API_URL or not KV_REST_API_TOKEN:
        logger.debug("KV store not configured; analysis results will not be cached")
        return None
    store = KVRestCacheStore(KV_REST_API_URL, KV_REST_API_TOKEN)
    return ResultCache(store, ttl_seconds=IMAGE_DIVERSITY_CACHE_TTL)
