"""Naver Cloud Platform geocoding provider.

Uses the NCP Maps Geocoding API
(https://api.ncloud-docs.com/docs/ai-naver-mapsgeocoding-geocode)
for Korean address-to-coordinate resolution. Requires an API key pair.
"""

import httpx
from loguru import logger

from geobatch.lib.geocoder.base import (
    BaseGeocoder,
    GeocodingProviderError,
    ProviderMatch,
    ProviderResponse,
)

NAVER_GEOCODE_URL = "https://maps.apigw.ntruss.com/map-geocode/v2/geocode"
DEFAULT_TIMEOUT = 30.0


class NaverGeocoder(BaseGeocoder):
    """Naver Maps geocoder provider."""

    def __init__(
        self,
        client_id: str = "",
        client_secret: str = "",
        timeout: float = DEFAULT_TIMEOUT,
        base_url: str = NAVER_GEOCODE_URL,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._timeout = timeout
        self._base_url = base_url

    @property
    def provider_name(self) -> str:
        return "naver"

    @property
    def requires_api_key(self) -> bool:
        return True

    @property
    def is_configured(self) -> bool:
        return bool(self._client_id and self._client_secret)

    async def lookup(self, address: str) -> ProviderResponse:
        """Query the Naver geocoding API for an address.

        Args:
            address: Normalized address string.

        Returns:
            ProviderResponse; a non-OK status or empty match list is returned,
            not raised.

        Raises:
            GeocodingProviderError: On transport, HTTP, or parse errors.
        """
        headers = {
            "x-ncp-apigw-api-key-id": self._client_id,
            "x-ncp-apigw-api-key": self._client_secret,
            "Accept": "application/json",
        }

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(self._base_url, params={"query": address}, headers=headers)
                response.raise_for_status()

            data = response.json()
            return self._parse_response(data)

        except httpx.TimeoutException as e:
            logger.warning("Naver geocoder timeout for address (redacted)")
            raise GeocodingProviderError("naver", "Geocoding request timed out") from e
        except httpx.HTTPStatusError as e:
            logger.warning(f"Naver geocoder HTTP error {e.response.status_code}")
            raise GeocodingProviderError(
                "naver",
                f"Provider returned HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.TransportError as e:
            logger.warning("Naver geocoder connection error")
            raise GeocodingProviderError("naver", "Connection to geocoding provider failed") from e
        except GeocodingProviderError:
            raise
        except ValueError as e:
            logger.warning(f"Naver geocoder returned an unreadable body: {e}")
            raise GeocodingProviderError("naver", f"Failed to parse response: {e}", retryable=False) from e

    def _parse_response(self, data: dict) -> ProviderResponse:
        """Parse a Naver geocoding response body.

        Args:
            data: Raw JSON response.

        Returns:
            ProviderResponse with matches in provider order.

        Raises:
            GeocodingProviderError: If a match lacks usable coordinates.
        """
        if not isinstance(data, dict):
            raise GeocodingProviderError("naver", "Response body is not a JSON object", retryable=False)

        api_status = data.get("status", "UNKNOWN")
        error_message = data.get("errorMessage") or None

        matches: list[ProviderMatch] = []
        for entry in data.get("addresses") or []:
            try:
                lng = float(entry["x"])
                lat = float(entry["y"])
                distance = float(entry.get("distance") or 0.0)
            except (KeyError, ValueError, TypeError) as e:
                logger.warning(f"Failed to parse Naver response: {e}")
                raise GeocodingProviderError("naver", f"Failed to parse response: {e}", retryable=False) from e

            matches.append(
                ProviderMatch(
                    latitude=lat,
                    longitude=lng,
                    distance=distance,
                    road_address=entry.get("roadAddress") or None,
                    jibun_address=entry.get("jibunAddress") or None,
                    english_address=entry.get("englishAddress") or None,
                    elements=entry.get("addressElements") or [],
                )
            )

        return ProviderResponse(status=api_status, matches=matches, error_message=error_message)
