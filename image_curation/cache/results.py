"""Content-addressed caching of diversity analysis results."""

from __future__ import annotations

import base64
import json
import logging
from typing import Iterable

from ..io.models import DiversityAnalysis
from .store import CacheStore

logger = logging.getLogger(__name__)

NAMESPACE = "image-diversity"
DEFAULT_TTL_SECONDS = 86400


def image_set_key(urls: Iterable[str]) -> str:
    """Return an order-independent key for the set of *urls*."""
    joined = "|".join(sorted(urls))
    return base64.b64encode(joined.encode("utf-8")).decode("ascii")


class ResultCache:
    """Stores :class:`DiversityAnalysis` results keyed by their input URL set.

    The cache is a side channel: store failures are logged and reported as a
    miss (on load) or ignored (on save), never raised to the caller.
    """

    def __init__(
        self,
        store: CacheStore,
        namespace: str = NAMESPACE,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
    ) -> None:
        self.store = store
        self.namespace = namespace
        self.ttl_seconds = ttl_seconds

    def key_for(self, urls: Iterable[str]) -> str:
        return f"{self.namespace}:{image_set_key(urls)}"

    def load(self, urls: Iterable[str]) -> DiversityAnalysis | None:
        """Return the cached analysis for *urls*, or ``None`` on a miss or failure."""
        key = self.key_for(urls)
        try:
            raw = self.store.get(key)
        except Exception as exc:  # noqa: BLE001 - cache must never fail the caller
            logger.warning("Cache lookup failed for %s: %s", key, exc)
            return None
        if raw is None:
            return None

        try:
            return DiversityAnalysis.from_dict(json.loads(raw))
        except (ValueError, TypeError, KeyError, AttributeError) as exc:
            logger.warning("Discarding unreadable cache entry %s: %s", key, exc)
            return None

    def save(self, urls: Iterable[str], analysis: DiversityAnalysis) -> None:
        """Persist *analysis* for *urls*; failures are logged and ignored."""
        key = self.key_for(urls)
        try:
            self.store.set(key, json.dumps(analysis.to_dict()), self.ttl_seconds)
        except Exception as exc:  # noqa: BLE001 - cache must never fail the caller
            logger.warning("Caching analysis under %s failed: %s", key, exc)
            return
        logger.debug("Cached analysis under %s for %ds", key, self.ttl_seconds)
