"""Abstract base geocoder interface and result types."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import StrEnum


class GeocodeStatus(StrEnum):
    """Outcome of a single geocoding lookup."""

    SUCCESS = "success"
    FAILED = "failed"
    PARTIAL = "partial"


def coordinates_in_range(latitude: float | None, longitude: float | None) -> bool:
    """Whether a coordinate pair is present and within WGS84 bounds."""
    if latitude is None or longitude is None:
        return False
    return -90 <= latitude <= 90 and -180 <= longitude <= 180


@dataclass
class GeocodeResult:
    """Result of geocoding one address.

    A ``success`` result always carries in-range coordinates.
    """

    address: str
    status: GeocodeStatus
    confidence: float = 0
    latitude: float | None = None
    longitude: float | None = None
    road_address: str | None = None
    jibun_address: str | None = None
    english_address: str | None = None
    error: str | None = None
    retry_count: int = 0

    def __post_init__(self) -> None:
        if self.status == GeocodeStatus.SUCCESS and not coordinates_in_range(self.latitude, self.longitude):
            msg = f"success result requires valid coordinates, got ({self.latitude}, {self.longitude})"
            raise ValueError(msg)
        if not (0 <= self.confidence <= 100):
            msg = f"confidence must be between 0 and 100, got {self.confidence}"
            raise ValueError(msg)

    @property
    def succeeded(self) -> bool:
        return self.status == GeocodeStatus.SUCCESS


@dataclass
class ProviderMatch:
    """One ranked address match returned by a provider."""

    latitude: float
    longitude: float
    distance: float = 0.0
    road_address: str | None = None
    jibun_address: str | None = None
    english_address: str | None = None
    elements: list[dict] = field(default_factory=list)


@dataclass
class ProviderResponse:
    """Parsed provider response: API status plus matches in relevance order."""

    status: str
    matches: list[ProviderMatch] = field(default_factory=list)
    error_message: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == "OK"


class GeocodingProviderError(Exception):
    """Raised when a geocoding provider experiences a transport or service error.

    Distinguishes provider failures (timeout, HTTP error, connection error)
    from a successful response with no match.

    Args:
        provider_name: Name of the failing provider.
        message: Human-readable error description.
        status_code: Optional HTTP status code from the provider.
        retryable: Explicit override of the status-code based classification.
    """

    def __init__(
        self,
        provider_name: str,
        message: str,
        status_code: int | None = None,
        *,
        retryable: bool | None = None,
    ) -> None:
        self.provider_name = provider_name
        self.message = message
        self.status_code = status_code
        self._retryable = retryable
        super().__init__(f"{provider_name}: {message}")

    @property
    def is_retryable(self) -> bool:
        """Transport failures, 5xx, and 429 are transient; other 4xx are not."""
        if self._retryable is not None:
            return self._retryable
        if self.status_code is None:
            return True
        return self.status_code >= 500 or self.status_code == 429


class BaseGeocoder(ABC):
    """Abstract geocoder provider. All providers must implement this."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Unique name identifying this geocoder provider."""

    @property
    def requires_api_key(self) -> bool:
        """Whether this provider requires credentials to function."""
        return False

    @property
    def is_configured(self) -> bool:
        """Whether this provider has all required configuration."""
        return True

    @abstractmethod
    async def lookup(self, address: str) -> ProviderResponse:
        """Issue one provider request for an address.

        Args:
            address: Normalized address string.

        Returns:
            ProviderResponse with matches ordered by relevance.

        Raises:
            GeocodingProviderError: On transport or HTTP errors.
        """
