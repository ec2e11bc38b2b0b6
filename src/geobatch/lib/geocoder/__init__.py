"""Geocoder library — provider adapters, caching, rate limiting, and retry.

Public API:
    - BaseGeocoder: Abstract provider interface
    - NaverGeocoder: Naver Cloud Platform provider
    - GeocodeResult / GeocodeStatus: Lookup result and outcome enum
    - ProviderResponse / ProviderMatch: Parsed provider payload
    - GeocodingProviderError: Transport/service failure with retry classification
    - GeocodeCache: In-memory result cache keyed by normalized address
    - RateLimiter: FIFO concurrency + pacing admission control
    - GeocodeClient: Cached, rate-limited, retrying front end
    - get_geocoder / get_available_providers: Provider registry
    - create_geocode_client: Build a client from application settings
    - is_in_korea / validate_korea_coordinates: Service-area checks
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from geobatch.lib.geocoder.base import (
    BaseGeocoder,
    GeocodeResult,
    GeocodeStatus,
    GeocodingProviderError,
    ProviderMatch,
    ProviderResponse,
    coordinates_in_range,
)
from geobatch.lib.geocoder.bounds import is_in_korea, validate_korea_coordinates
from geobatch.lib.geocoder.cache import GeocodeCache
from geobatch.lib.geocoder.client import GeocodeClient, distance_confidence
from geobatch.lib.geocoder.naver import NaverGeocoder
from geobatch.lib.geocoder.rate_limiter import RateLimiter

if TYPE_CHECKING:
    from geobatch.core.config import Settings

# Provider registry: all known providers
_PROVIDERS: dict[str, type[BaseGeocoder]] = {
    "naver": NaverGeocoder,
}


def get_available_providers() -> list[str]:
    """Return the names of all registered geocoder providers."""
    return sorted(_PROVIDERS.keys())


def get_geocoder(provider: str = "naver", **kwargs: Any) -> BaseGeocoder:
    """Get a geocoder instance by provider name.

    Args:
        provider: Provider name (e.g., "naver").
        **kwargs: Forwarded to the provider constructor.

    Returns:
        An instance of the requested provider.

    Raises:
        ValueError: If the provider is not registered.
    """
    cls = _PROVIDERS.get(provider)
    if cls is None:
        msg = f"Unknown geocoder provider: {provider!r}. Available: {list(_PROVIDERS.keys())}"
        raise ValueError(msg)
    return cls(**kwargs)


def create_geocode_client(settings: Settings) -> GeocodeClient:
    """Build a GeocodeClient wired to the Naver provider from settings.

    Args:
        settings: Application settings.

    Returns:
        A client with its own cache and rate limiter.
    """
    provider = get_geocoder(
        "naver",
        client_id=settings.naver_client_id,
        client_secret=settings.naver_client_secret,
        timeout=settings.geocoder_timeout,
        base_url=settings.naver_geocoding_url,
    )
    limiter = RateLimiter(
        requests_per_second=settings.geocoder_rate_limit_per_second,
        max_concurrency=settings.geocoder_max_concurrency,
    )
    return GeocodeClient(
        provider,
        limiter,
        max_retries=settings.geocoder_max_retries,
        backoff_base=settings.geocoder_retry_backoff_base,
    )


__all__ = [
    "BaseGeocoder",
    "GeocodeCache",
    "GeocodeClient",
    "GeocodeResult",
    "GeocodeStatus",
    "GeocodingProviderError",
    "NaverGeocoder",
    "ProviderMatch",
    "ProviderResponse",
    "RateLimiter",
    "coordinates_in_range",
    "create_geocode_client",
    "distance_confidence",
    "get_available_providers",
    "get_geocoder",
    "is_in_korea",
    "validate_korea_coordinates",
]
