"""
Fetch scheduling for the per-site extractors.

The extractors themselves live outside this app; whatever fetch coroutine
they provide is driven through FetchScheduler, which bounds fan-out and
spaces requests politely. Optional enrichment lookups (LLM, review sites)
are cached through LookupCache, which only keeps confirmed hits for the long
TTL so a transient miss is retried next run instead of sticking.

Usage:
    scheduler = FetchScheduler()
    lookups = LookupCache("review-site")
    outcomes = await scheduler.run(urls, fetch_page, cached=lookups.get)
    for outcome in outcomes:
        if outcome.ok and not outcome.cached:
            lookups.store(outcome.url, outcome.result)
"""

import asyncio
import hashlib
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, List, Optional

from django.conf import settings
from django.core.cache import caches

logger = logging.getLogger(__name__)


@dataclass
class FetchOutcome:
    """Result of fetching one URL."""

    url: str
    result: Any = None
    error: Optional[str] = None
    cached: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


class FetchScheduler:
    """
    Bounded, polite async fan-out.

    At most ``max_concurrency`` fetches are in flight; after every real
    fetch (not a cache hit) the slot is held for ``polite_delay`` seconds.
    A failing URL is logged and reported in its outcome without aborting
    the batch.
    """

    def __init__(self, max_concurrency: Optional[int] = None, polite_delay: Optional[float] = None):
        self.max_concurrency = max_concurrency or getattr(
            settings, "BOARDS_MAX_CONCURRENT_FETCHES", 3
        )
        if polite_delay is None:
            polite_delay = getattr(settings, "BOARDS_POLITE_DELAY", 1.0)
        self.polite_delay = polite_delay
        self.in_flight = 0
        self.peak_in_flight = 0

    async def run(
        self,
        urls: Iterable[str],
        fetch: Callable[[str], Awaitable[Any]],
        cached: Optional[Callable[[str], Any]] = None,
    ) -> List[FetchOutcome]:
        """
        Fetch every URL, returning outcomes in input order.

        Args:
            urls: URLs to fetch
            fetch: Coroutine function fetching one URL
            cached: Optional lookup returning a cached result or None
        """
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def fetch_one(url: str) -> FetchOutcome:
            if cached is not None:
                hit = cached(url)
                if hit is not None:
                    logger.debug(f"Cache hit: {url}")
                    return FetchOutcome(url=url, result=hit, cached=True)

            async with semaphore:
                self.in_flight += 1
                self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
                try:
                    outcome = FetchOutcome(url=url, result=await fetch(url))
                except Exception as e:
                    logger.warning(f"Fetch failed for {url}: {e}")
                    outcome = FetchOutcome(url=url, error=str(e) or type(e).__name__)
                finally:
                    self.in_flight -= 1
                if self.polite_delay > 0:
                    await asyncio.sleep(self.polite_delay)
                return outcome

        outcomes = await asyncio.gather(*(fetch_one(url) for url in urls))
        failed = sum(1 for outcome in outcomes if not outcome.ok)
        logger.info(f"Fetched {len(outcomes)} URLs ({failed} failed)")
        return list(outcomes)


class LookupCache:
    """
    Django-cache-backed store for enrichment lookups.

    Confirmed hits live for BOARDS_LOOKUP_CACHE_TTL; misses are remembered
    only for BOARDS_LOOKUP_MISS_TTL so they are retried on a later run.
    """

    CACHE_ALIAS = "default"
    KEY_PREFIX = "boards_lookup:"

    def __init__(self, namespace: str, cache_alias: Optional[str] = None):
        self.namespace = namespace
        self._cache_alias = cache_alias or self.CACHE_ALIAS
        self.hit_ttl = getattr(settings, "BOARDS_LOOKUP_CACHE_TTL", 7 * 24 * 60 * 60)
        self.miss_ttl = getattr(settings, "BOARDS_LOOKUP_MISS_TTL", 60 * 60)

    @property
    def _cache(self):
        return caches[self._cache_alias]

    def _get_cache_key(self, key: str) -> str:
        digest = hashlib.sha256(key.strip().lower().encode("utf-8")).hexdigest()[:32]
        return f"{self.KEY_PREFIX}{self.namespace}:{digest}"

    def get(self, key: str) -> Any:
        """Cached hit for key, or None (also None for a remembered miss)."""
        entry = self._cache.get(self._get_cache_key(key))
        if not entry or not entry.get("hit"):
            return None
        return entry.get("value")

    def is_known_miss(self, key: str) -> bool:
        entry = self._cache.get(self._get_cache_key(key))
        return bool(entry) and not entry.get("hit")

    def store(self, key: str, value: Any) -> None:
        """Store a lookup result; None or empty is recorded as a short-lived miss."""
        if value is None or value == {} or value == []:
            self._cache.set(self._get_cache_key(key), {"hit": False}, timeout=self.miss_ttl)
            logger.debug(f"Lookup miss cached for {self.miss_ttl}s: {key}")
            return
        self._cache.set(
            self._get_cache_key(key), {"hit": True, "value": value}, timeout=self.hit_ttl
        )
