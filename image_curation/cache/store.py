"""Key-value stores backing the analysis result cache."""

from __future__ import annotations

import logging
import time
from threading import Lock
from typing import Any, Callable, Dict, Protocol, Tuple

import requests
from requests import Session
from tenacity import (  # type: ignore[import-untyped]
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 5.0


class CacheError(Exception):
    """Raised when a cache store cannot complete a command."""


class RetryableHTTPStatusError(Exception):
    """Raised for HTTP status codes that should trigger a retry."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"Server returned status {status_code}")
        self.status_code = status_code


class CacheStore(Protocol):
    """Minimal string key-value interface with per-entry expiry."""

    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        ...


class InMemoryCacheStore:
    """Process-local cache store with monotonic-clock expiry."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: Dict[str, Tuple[str, float]] = {}
        self._lock = Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        with self._lock:
            now = self._clock()
            expired = [name for name, (_, expires_at) in self._entries.items() if now >= expires_at]
            for name in expired:
                del self._entries[name]
            self._entries[key] = (value, now + ttl_seconds)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


_retryer = Retrying(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=5),
    retry=retry_if_exception_type(
        (requests.Timeout, requests.ConnectionError, RetryableHTTPStatusError)
    ),
    before_sleep=before_sleep_log(logger, logging.DEBUG),
    reraise=True,
)


class KVRestCacheStore:
    """Redis-compatible REST key-value store (Upstash / Vercel KV protocol).

    Commands are posted as JSON arrays to the store URL with bearer-token
    authentication, and the reply's ``result`` member is returned. Transient
    failures (timeouts, connection errors, 5xx replies) are retried; anything
    else surfaces as :class:`CacheError`.
    """

    def __init__(
        self,
        url: str,
        token: str,
        timeout: float = _DEFAULT_TIMEOUT,
        session: Session | None = None,
    ) -> None:
        if not url or not token:
            raise ValueError("KV store requires both a URL and a token")
        self._url = url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()
        self._headers = {"Authorization": f"Bearer {token}"}
        self._retryer = _retryer

    def get(self, key: str) -> str | None:
        result = self._command("GET", key)
        if result is None:
            return None
        return result if isinstance(result, str) else str(result)

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self._command("SET", key, value, "EX", int(ttl_seconds))

    def _command(self, *command: Any) -> Any:
        try:
            payload = self._retryer(lambda: self._send(list(command)))
        except RetryableHTTPStatusError as exc:
            raise CacheError(f"KV {command[0]} failed: {exc}") from exc
        except requests.RequestException as exc:
            raise CacheError(f"KV {command[0]} request error: {exc}") from exc

        if not isinstance(payload, dict):
            raise CacheError(f"KV {command[0]} returned an unexpected payload")
        if payload.get("error"):
            raise CacheError(f"KV {command[0]} rejected: {payload['error']}")
        return payload.get("result")

    def _send(self, command: list[Any]) -> Any:
        response = self._session.post(
            self._url, json=command, headers=self._headers, timeout=self._timeout
        )
        if 500 <= response.status_code < 600:
            raise RetryableHTTPStatusError(response.status_code)
        try:
            return response.json()
        except ValueError as exc:
            raise CacheError(
                f"KV store replied with status {response.status_code} and no JSON body"
            ) from exc
