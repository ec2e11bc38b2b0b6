"""Geocode client — caching, admission control, and retry around a provider.

Every lookup goes through the in-memory cache first; misses take a
rate-limiter slot per provider attempt and retry transient provider errors
with exponential backoff.  Every outcome, success or failure, is cached so
repeated identical queries never re-dispatch.
"""

import asyncio
import dataclasses
from collections.abc import Callable

from loguru import logger

from geobatch.lib.address.normalize import normalize_address
from geobatch.lib.geocoder.base import (
    BaseGeocoder,
    GeocodeResult,
    GeocodeStatus,
    GeocodingProviderError,
    ProviderResponse,
    coordinates_in_range,
)
from geobatch.lib.geocoder.cache import GeocodeCache
from geobatch.lib.geocoder.rate_limiter import RateLimiter

DEFAULT_MAX_RETRIES = 3
DEFAULT_BACKOFF_BASE = 1.0  # seconds

NOT_FOUND_MESSAGE = "Address not found"
EMPTY_ADDRESS_MESSAGE = "Address is empty"

ProgressCallback = Callable[[int, int], None]


def distance_confidence(distance: float) -> float:
    """Map provider relevance distance to a 0-100 confidence."""
    return max(0.0, min(100.0, 100.0 - distance * 10))


class GeocodeClient:
    """Cached, rate-limited, retrying geocoder front end."""

    def __init__(
        self,
        provider: BaseGeocoder,
        limiter: RateLimiter | None = None,
        *,
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff_base: float = DEFAULT_BACKOFF_BASE,
        cache: GeocodeCache | None = None,
    ) -> None:
        self._provider = provider
        self._limiter = limiter or RateLimiter()
        self._max_retries = max_retries
        self._backoff_base = backoff_base
        self._cache = cache if cache is not None else GeocodeCache()
        self._inflight: dict[str, asyncio.Task[GeocodeResult]] = {}

    @property
    def provider(self) -> BaseGeocoder:
        return self._provider

    @property
    def limiter(self) -> RateLimiter:
        return self._limiter

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    def clear_cache(self) -> None:
        self._cache.clear()

    def limiter_status(self) -> dict[str, int]:
        return self._limiter.status()

    async def geocode(self, address: str) -> GeocodeResult:
        """Geocode one address.

        Cache hits return immediately without taking a limiter slot.
        Concurrent misses for the same normalized address share one
        provider call.

        Args:
            address: Address string (normally already normalized).

        Returns:
            GeocodeResult copy; provider failures are reported as ``failed``
            results rather than raised.
        """
        key = normalize_address(address).normalized
        if not key:
            return GeocodeResult(address=address or "", status=GeocodeStatus.FAILED, error=EMPTY_ADDRESS_MESSAGE)

        cached = self._cache.lookup(key)
        if cached is not None:
            return cached

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.create_task(self._lookup_and_cache(key))
            self._inflight[key] = task
            task.add_done_callback(lambda t, k=key: self._lookup_done(k, t))

        # Shielded so one cancelled caller does not abort the lookup for the others.
        result = await asyncio.shield(task)
        return dataclasses.replace(result)

    async def geocode_batch(
        self,
        addresses: list[str],
        on_progress: ProgressCallback | None = None,
    ) -> list[GeocodeResult]:
        """Geocode addresses one at a time, in input order.

        Args:
            addresses: Address strings.
            on_progress: Called with (processed, total) after each item.

        Returns:
            Results in the same order as the input.
        """
        results: list[GeocodeResult] = []
        total = len(addresses)
        for index, address in enumerate(addresses, start=1):
            results.append(await self.geocode(address))
            if on_progress is not None:
                on_progress(index, total)
        return results

    async def _lookup_and_cache(self, address: str) -> GeocodeResult:
        result = await self._lookup_with_retry(address)
        self._cache.store(address, result)
        return result

    def _lookup_done(self, key: str, task: asyncio.Task[GeocodeResult]) -> None:
        self._inflight.pop(key, None)
        # Retrieve the error so a lookup whose callers were all cancelled is not reported as unretrieved.
        if not task.cancelled() and task.exception() is not None:
            logger.warning(f"Geocode lookup failed: {task.exception()!r}")

    async def _lookup_with_retry(self, address: str) -> GeocodeResult:
        """Call the provider, retrying transient errors with exponential backoff."""
        attempt = 0
        while True:
            try:
                async with self._limiter.slot():
                    response = await self._provider.lookup(address)
                return self._classify(address, response, attempt)
            except GeocodingProviderError as e:
                if not e.is_retryable or attempt >= self._max_retries:
                    logger.warning(f"Geocode failed after {attempt + 1} attempt(s): {e}")
                    return GeocodeResult(
                        address=address,
                        status=GeocodeStatus.FAILED,
                        error=e.message,
                        retry_count=attempt,
                    )
                delay = self._backoff_base * (2**attempt)
                logger.debug(f"Geocode retry {attempt + 1}/{self._max_retries} in {delay}s: {e}")
                await asyncio.sleep(delay)
                attempt += 1

    def _classify(self, address: str, response: ProviderResponse, retry_count: int) -> GeocodeResult:
        """Turn a provider response into a GeocodeResult using the first (most relevant) match."""
        if not response.ok or not response.matches:
            return GeocodeResult(
                address=address,
                status=GeocodeStatus.FAILED,
                error=response.error_message or NOT_FOUND_MESSAGE,
                retry_count=retry_count,
            )

        best = response.matches[0]
        if not coordinates_in_range(best.latitude, best.longitude):
            return GeocodeResult(
                address=address,
                status=GeocodeStatus.FAILED,
                error="Provider returned out-of-range coordinates",
                retry_count=retry_count,
            )

        return GeocodeResult(
            address=address,
            status=GeocodeStatus.SUCCESS,
            confidence=distance_confidence(best.distance),
            latitude=best.latitude,
            longitude=best.longitude,
            road_address=best.road_address,
            jibun_address=best.jibun_address,
            english_address=best.english_address,
            retry_count=retry_count,
        )
