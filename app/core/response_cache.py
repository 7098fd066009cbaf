"""
In-memory response cache with TTL expiry and per-key in-flight de-duplication.

One instance is created by ``create_app`` and shared by every request through
``app.state.response_cache``. All access happens on the event loop thread, so
the only synchronization needed is the future table: concurrent requests for
the same key await a single computation instead of repeating upstream work.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 60 * 60  # 1 hour

# How a caller was served.
HIT = "HIT"
SHARED = "SHARED"
MISS = "MISS"

RawHeaders = Tuple[Tuple[bytes, bytes], ...]


@dataclass(frozen=True)
class CachedResponse:
    status_code: int
    headers: RawHeaders
    body: bytes

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    def header(self, name: str) -> Optional[str]:
        wanted = name.lower().encode("latin-1")
        for key, value in self.headers:
            if key.lower() == wanted:
                return value.decode("latin-1")
        return None


@dataclass(frozen=True)
class CacheEntry:
    key: str
    response: CachedResponse
    stored_at: float
    ttl: float

    def is_live(self, now: float) -> bool:
        return now - self.stored_at < self.ttl

    def remaining(self, now: float) -> float:
        return max(0.0, self.ttl - (now - self.stored_at))


def cache_key(method: str, path: str, query: str = "") -> str:
    """Exact request identity; parameter order is significant."""
    return f"{method.upper()} {path}?{query or ''}"


class ResponseCache:
    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: Optional[int] = None,
        cache_failures: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_entries is not None and max_entries <= 0:
            raise ValueError("max_entries must be positive when set")
        self.ttl_seconds = ttl_seconds
        # Optional LRU bound; None keeps every live entry until it expires.
        self.max_entries = max_entries
        self.cache_failures = cache_failures
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._in_flight: Dict[str, asyncio.Future] = {}
        self.hits = 0
        self.shared = 0
        self.misses = 0

    def now(self) -> float:
        return self._clock()

    def get(self, key: str) -> Optional[CacheEntry]:
        """Return the live entry for `key`, dropping it if it has expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not entry.is_live(self._clock()):
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        return entry

    def _should_store(self, response: CachedResponse) -> bool:
        return response.is_success or self.cache_failures

    def _purge_expired(self) -> None:
        now = self._clock()
        for key in [k for k, e in self._entries.items() if not e.is_live(now)]:
            del self._entries[key]

    def _store(self, key: str, response: CachedResponse) -> None:
        self._purge_expired()
        self._entries[key] = CacheEntry(key, response, self._clock(), self.ttl_seconds)
        self._entries.move_to_end(key)
        if self.max_entries is not None:
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("[response_cache] evicted %s", evicted)

    async def get_or_compute(
        self,
        key: str,
        compute: Callable[[], Awaitable[CachedResponse]],
    ) -> CachedResponse:
        response, _ = await self.lookup_or_compute(key, compute)
        return response

    async def lookup_or_compute(
        self,
        key: str,
        compute: Callable[[], Awaitable[CachedResponse]],
    ) -> Tuple[CachedResponse, str]:
        """Like get_or_compute, also returning HIT, SHARED (joined in-flight) or MISS."""
        while True:
            entry = self.get(key)
            if entry is not None:
                self.hits += 1
                logger.debug("[response_cache] hit %s", key)
                return entry.response, HIT
            pending = self._in_flight.get(key)
            if pending is None:
                break
            logger.debug("[response_cache] joining in-flight %s", key)
            try:
                response = await asyncio.shield(pending)
            except asyncio.CancelledError:
                # Leader was abandoned; take over the computation.
                if pending.cancelled():
                    continue
                raise
            self.shared += 1
            return response, SHARED

        self.misses += 1
        logger.debug("[response_cache] miss %s", key)
        future = asyncio.get_running_loop().create_future()
        self._in_flight[key] = future
        try:
            response = await compute()
            if self._should_store(response):
                self._store(key, response)
            future.set_result(response)
            return response, MISS
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as exc:
            future.set_exception(exc)
            future.exception()  # joiners re-raise it; silence "never retrieved"
            raise
        finally:
            if not future.done():
                future.cancel()
            if self._in_flight.get(key) is future:
                del self._in_flight[key]

    def clear(self) -> None:
        self._entries.clear()

    def stats(self) -> dict:
        now = self._clock()
        return {
            "cached_entries": sum(1 for e in self._entries.values() if e.is_live(now)),
            "stored_entries": len(self._entries),
            "in_flight": len(self._in_flight),
            "hits": self.hits,
            "shared": self.shared,
            "misses": self.misses,
            "ttl_seconds": self.ttl_seconds,
            "max_entries": self.max_entries,
        }
