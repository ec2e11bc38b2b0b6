"""Unit tests for the Naver geocoding provider."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from geobatch.lib.geocoder.base import GeocodingProviderError
from geobatch.lib.geocoder.naver import NaverGeocoder

NAVER_OK = {
    "status": "OK",
    "meta": {"totalCount": 1},
    "addresses": [
        {
            "roadAddress": "서울특별시 강남구 테헤란로 152",
            "jibunAddress": "서울특별시 강남구 역삼동 737",
            "englishAddress": "152, Teheran-ro, Gangnam-gu, Seoul, Republic of Korea",
            "addressElements": [],
            "x": "127.0365",
            "y": "37.5001",
            "distance": 1.5,
        }
    ],
    "errorMessage": "",
}


def _ok_response(data: dict) -> MagicMock:
    mock_response = MagicMock()
    mock_response.status_code = 200
    mock_response.json.return_value = data
    mock_response.raise_for_status = MagicMock()
    return mock_response


class TestNaverResponseParsing:
    """Tests for Naver response parsing."""

    def setup_method(self) -> None:
        self.geocoder = NaverGeocoder(client_id="id", client_secret="secret")

    def test_successful_match(self) -> None:
        response = self.geocoder._parse_response(NAVER_OK)
        assert response.ok is True
        assert len(response.matches) == 1
        match = response.matches[0]
        assert match.latitude == 37.5001
        assert match.longitude == 127.0365
        assert match.distance == 1.5
        assert match.road_address == "서울특별시 강남구 테헤란로 152"
        assert match.jibun_address == "서울특별시 강남구 역삼동 737"
        assert response.error_message is None

    def test_no_matches(self) -> None:
        response = self.geocoder._parse_response({"status": "OK", "addresses": []})
        assert response.ok is True
        assert response.matches == []

    def test_error_status(self) -> None:
        response = self.geocoder._parse_response({"status": "INVALID_REQUEST", "errorMessage": "query is INVALID"})
        assert response.ok is False
        assert response.error_message == "query is INVALID"

    def test_missing_coordinates_raises(self) -> None:
        with pytest.raises(GeocodingProviderError) as exc_info:
            self.geocoder._parse_response({"status": "OK", "addresses": [{"roadAddress": "x"}]})
        assert exc_info.value.is_retryable is False

    def test_non_object_body_raises(self) -> None:
        with pytest.raises(GeocodingProviderError):
            self.geocoder._parse_response([])  # type: ignore[arg-type]


class TestNaverGeocoderRequests:
    """Tests for Naver HTTP calls and error differentiation."""

    @pytest.mark.asyncio
    async def test_sends_query_and_credentials(self) -> None:
        geocoder = NaverGeocoder(client_id="my-id", client_secret="my-secret")
        with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=_ok_response(NAVER_OK)) as mock_get:
            response = await geocoder.lookup("서울특별시 강남구 테헤란로 152")

        assert response.matches[0].latitude == 37.5001
        kwargs = mock_get.call_args.kwargs
        assert kwargs["params"] == {"query": "서울특별시 강남구 테헤란로 152"}
        assert kwargs["headers"]["x-ncp-apigw-api-key-id"] == "my-id"
        assert kwargs["headers"]["x-ncp-apigw-api-key"] == "my-secret"

    @pytest.mark.asyncio
    async def test_timeout_raises_retryable_error(self) -> None:
        geocoder = NaverGeocoder(timeout=0.1)
        with (
            patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get,
            pytest.raises(GeocodingProviderError, match="naver") as exc_info,
        ):
            mock_get.side_effect = httpx.TimeoutException("Connection timed out")
            await geocoder.lookup("서울특별시 중구")

        assert exc_info.value.status_code is None
        assert exc_info.value.is_retryable is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize(("status_code", "retryable"), [(500, True), (503, True), (429, True), (401, False)])
    async def test_http_status_error(self, status_code: int, retryable: bool) -> None:
        geocoder = NaverGeocoder()
        mock_response = httpx.Response(status_code=status_code, request=httpx.Request("GET", "http://test"))
        with (
            patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get,
            pytest.raises(GeocodingProviderError) as exc_info,
        ):
            mock_get.side_effect = httpx.HTTPStatusError(
                "error", request=mock_response.request, response=mock_response
            )
            await geocoder.lookup("서울특별시 중구")

        assert exc_info.value.status_code == status_code
        assert exc_info.value.is_retryable is retryable

    @pytest.mark.asyncio
    async def test_connection_error(self) -> None:
        geocoder = NaverGeocoder()
        with (
            patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get,
            pytest.raises(GeocodingProviderError) as exc_info,
        ):
            mock_get.side_effect = httpx.ConnectError("Connection refused")
            await geocoder.lookup("서울특별시 중구")

        assert exc_info.value.provider_name == "naver"
        assert exc_info.value.is_retryable is True

    @pytest.mark.asyncio
    async def test_unreadable_body_is_not_retryable(self) -> None:
        geocoder = NaverGeocoder()
        mock_response = _ok_response({})
        mock_response.json.side_effect = ValueError("Expecting value")
        with (
            patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=mock_response),
            pytest.raises(GeocodingProviderError) as exc_info,
        ):
            await geocoder.lookup("서울특별시 중구")

        assert exc_info.value.is_retryable is False

    def test_is_configured(self) -> None:
        assert NaverGeocoder().is_configured is False
        assert NaverGeocoder(client_id="a", client_secret="b").is_configured is True
        assert NaverGeocoder().requires_api_key is True


class TestGetGeocoder:
    """Tests for the provider registry."""

    def test_get_naver(self) -> None:
        from geobatch.lib.geocoder import get_available_providers, get_geocoder

        assert get_geocoder("naver").provider_name == "naver"
        assert get_available_providers() == ["naver"]

    def test_unknown_provider(self) -> None:
        from geobatch.lib.geocoder import get_geocoder

        with pytest.raises(ValueError, match="Unknown geocoder provider"):
            get_geocoder("nonexistent")
