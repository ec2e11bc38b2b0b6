"""Application configuration via Pydantic Settings.

All configuration is loaded from environment variables following 12-factor principles.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Geocoding: Naver provider
    naver_client_id: str = Field(
        default="",
        description="Naver Cloud Platform API key ID",
    )
    naver_client_secret: str = Field(
        default="",
        description="Naver Cloud Platform API key",
    )
    naver_geocoding_url: str = Field(
        default="https://maps.apigw.ntruss.com/map-geocode/v2/geocode",
        description="Naver geocoding endpoint URL",
    )

    @field_validator("naver_geocoding_url")
    @classmethod
    def validate_naver_geocoding_url(cls, v: str) -> str:
        if not v.startswith(("https://", "http://")):
            msg = "naver_geocoding_url must be an http(s) URL"
            raise ValueError(msg)
        return v

    # Geocoding: general
    geocoder_timeout: float = Field(
        default=30.0,
        description="Provider request timeout in seconds",
        gt=0,
    )
    geocoder_max_retries: int = Field(
        default=3,
        description="Retries after the first attempt for transient provider errors",
        ge=0,
    )
    geocoder_retry_backoff_base: float = Field(
        default=1.0,
        description="Base delay in seconds for exponential retry backoff",
        ge=0,
    )
    geocoder_rate_limit_per_second: float = Field(
        default=10,
        description="Maximum provider requests granted per second",
        gt=0,
    )
    geocoder_max_concurrency: int = Field(
        default=5,
        description="Maximum simultaneous in-flight provider requests",
        gt=0,
    )

    # Batch processing
    batch_checkpoint_interval: int = Field(
        default=100,
        description="Processed items between progress checkpoints",
        gt=0,
    )
    batch_concurrency: int = Field(
        default=1,
        description="Dispatch workers per job (1 keeps input-order sequential processing)",
        gt=0,
    )

    # Reports
    report_top_n: int = Field(
        default=20,
        description="Rows kept in address and region ranking tables",
        gt=0,
    )
    output_dir: str = Field(
        default="./outputs",
        description="Directory for result CSVs and reports",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_dir: str | None = Field(
        default=None,
        description="Directory for log files (enables file logging with 24h rotation when set)",
    )

    @property
    def naver_configured(self) -> bool:
        """Whether both Naver credentials are present."""
        return bool(self.naver_client_id and self.naver_client_secret)


def get_settings() -> Settings:
    """Create and return application settings."""
    return Settings()
