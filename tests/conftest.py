"""Shared test fixtures for settings and sample address data."""

import pytest

from geobatch.core.config import Settings


@pytest.fixture
def settings() -> Settings:
    """Test application settings with fake provider credentials."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        naver_client_id="test-client-id",
        naver_client_secret="test-client-secret",
        geocoder_rate_limit_per_second=1000,
        geocoder_max_concurrency=3,
        geocoder_max_retries=2,
        geocoder_retry_backoff_base=0,
    )


@pytest.fixture
def sample_addresses() -> list[str]:
    """Raw addresses mixing abbreviated, canonical, and blank rows."""
    return [
        "서울 강남구 테헤란로 152",
        "서울특별시 강남구 테헤란로 152",
        "부산 해운대구 우동 1",
        "",
        "경기 수원시 팔달구 효원로 1",
    ]
